"""Immutable provider registry handed to the fallback orchestrator."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, Optional, Tuple

from code_analysis_ai.config.settings import Settings, secret_value

from .base import BaseProvider, Capability
from .gemini_provider import GeminiProvider
from .groq_provider import GroqProvider
from .huggingface_provider import HuggingFaceProvider
from .retry_handler import RetryHandler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderDescriptor:
    """A registered provider with its static priority (lower is tried first)."""

    name: str
    provider: BaseProvider
    priority: int
    capabilities: Optional[FrozenSet[Capability]] = None
    availability: Optional[Callable[[], bool]] = field(default=None, compare=False)

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Provider name must be a non-empty string")
        if self.capabilities is None:
            object.__setattr__(self, "capabilities", frozenset(self.provider.capabilities))
        else:
            object.__setattr__(self, "capabilities", frozenset(self.capabilities))
        if self.availability is None:
            object.__setattr__(self, "availability", self.provider.is_available)

    @property
    def key(self) -> str:
        return self.name.lower()

    def is_available(self) -> bool:
        return bool(self.availability())

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities


class ProviderRegistry:
    """Read-only, ordered collection of provider descriptors."""

    def __init__(self, descriptors: Iterable[ProviderDescriptor]):
        descriptors = tuple(descriptors)
        seen: Dict[str, str] = {}
        for descriptor in descriptors:
            if descriptor.key in seen:
                raise ValueError(
                    f"Duplicate provider name {descriptor.name!r} "
                    f"(already registered as {seen[descriptor.key]!r})"
                )
            seen[descriptor.key] = descriptor.name
        self._descriptors: Tuple[ProviderDescriptor, ...] = descriptors

    def __iter__(self) -> Iterator[ProviderDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    @property
    def descriptors(self) -> Tuple[ProviderDescriptor, ...]:
        return self._descriptors

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(descriptor.name for descriptor in self._descriptors)

    def get(self, name: str) -> Optional[ProviderDescriptor]:
        """Case-insensitive lookup."""
        key = name.lower()
        for descriptor in self._descriptors:
            if descriptor.key == key:
                return descriptor
        return None

    def configured(self) -> Dict[str, bool]:
        """Availability per provider, keyed by lower-cased name."""
        return {descriptor.key: descriptor.is_available() for descriptor in self._descriptors}

    async def aclose(self) -> None:
        for descriptor in self._descriptors:
            try:
                await descriptor.provider.aclose()
            except Exception as e:
                logger.warning(f"Error closing provider {descriptor.name}: {e}")


def build_default_registry(settings: Settings) -> ProviderRegistry:
    """Create the Gemini, Groq and Hugging Face adapters from settings."""

    def retry_handler() -> RetryHandler:
        return RetryHandler(max_attempts=settings.max_retries, base_delay=settings.retry_base_delay)

    gemini = GeminiProvider(
        secret_value(settings.gemini_api_key),
        model=settings.gemini_model,
        base_url=settings.gemini_base_url,
        timeout=settings.request_timeout,
        retry_handler=retry_handler(),
    )
    groq = GroqProvider(
        secret_value(settings.groq_api_key),
        model=settings.groq_model,
        base_url=settings.groq_base_url,
        timeout=settings.request_timeout,
        retry_handler=retry_handler(),
    )
    huggingface = HuggingFaceProvider(
        secret_value(settings.huggingface_api_key),
        model=settings.huggingface_model,
        base_url=settings.huggingface_base_url,
        timeout=settings.request_timeout,
        retry_handler=retry_handler(),
    )

    return ProviderRegistry(
        [
            ProviderDescriptor(name=gemini.name, provider=gemini, priority=1),
            ProviderDescriptor(name=groq.name, provider=groq, priority=2),
            ProviderDescriptor(name=huggingface.name, provider=huggingface, priority=3),
        ]
    )
