"""Provider orchestration with prioritized, sequential failover."""

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

import structlog

from code_analysis_ai.exceptions import OrchestrationExhausted

from .base import (
    BaseProvider,
    Capability,
    ProviderError,
    ProviderErrorKind,
    ProviderUnsupportedCapability,
)
from .registry import ProviderDescriptor, ProviderRegistry

logger = structlog.get_logger()

T = TypeVar("T")

AUTO = "auto"


@dataclass(frozen=True)
class FailureRecord:
    """One failed attempt, kept only to build diagnostics for the current call."""

    provider: str
    kind: ProviderErrorKind
    message: str

    @property
    def unsupported(self) -> bool:
        return self.kind is ProviderErrorKind.UNSUPPORTED


@dataclass(frozen=True)
class FallbackResult(Generic[T]):
    """First successful result together with the provider that produced it."""

    result: T
    provider_name: str
    failures: List[FailureRecord] = field(default_factory=list)


class FallbackOrchestrator:
    """Tries available providers in priority order until one succeeds.

    Attempts are strictly sequential. Every failure, rate limit or otherwise, moves
    on to the next candidate; only exhausting the list fails the call. Cancellation
    is never caught here and aborts the remaining candidates.
    """

    def __init__(self, registry: ProviderRegistry):
        self.registry = registry
        logger.info(
            "Orchestrator initialized",
            providers=list(registry.names),
        )

    def select_providers(self, preferred_provider: Optional[str] = None) -> List[ProviderDescriptor]:
        """Ordered candidate list for one invocation.

        Available providers sorted by ascending priority (stable), with the preferred
        provider, when it names an available one, moved to the front.
        """
        candidates = sorted(
            (descriptor for descriptor in self.registry if descriptor.is_available()),
            key=lambda descriptor: descriptor.priority,
        )

        if preferred_provider and preferred_provider.lower() != AUTO:
            key = preferred_provider.lower()
            for index, descriptor in enumerate(candidates):
                if descriptor.key == key:
                    candidates.insert(0, candidates.pop(index))
                    break

        return candidates

    def available_provider_names(self) -> List[str]:
        return [descriptor.name for descriptor in self.select_providers()]

    async def execute(
        self,
        operation: Callable[[BaseProvider], Awaitable[T]],
        capability: Capability,
        preferred_provider: Optional[str] = None,
    ) -> FallbackResult[T]:
        """Run ``operation`` against each candidate until the first success.

        Raises:
            OrchestrationExhausted: If every candidate failed or none was available
        """
        candidates = self.select_providers(preferred_provider)
        failures: List[FailureRecord] = []

        if not candidates:
            logger.error("No AI providers available", operation=capability.value)
            raise OrchestrationExhausted(failures)

        for attempt, descriptor in enumerate(candidates, start=1):
            log = logger.bind(
                provider=descriptor.name,
                operation=capability.value,
                attempt=attempt,
                candidates=len(candidates),
            )

            if not descriptor.supports(capability):
                error = ProviderUnsupportedCapability(capability, provider=descriptor.name)
                log.info("Provider does not support operation, skipping", reason=error.message)
                failures.append(FailureRecord(descriptor.name, error.kind, error.message))
                continue

            log.info(f"Attempting operation with {descriptor.name}")
            start_time = time.time()
            try:
                result = await operation(descriptor.provider)
            except ProviderUnsupportedCapability as e:
                log.info("Provider does not support operation, skipping", reason=e.message)
                failures.append(FailureRecord(descriptor.name, e.kind, e.message))
                continue
            except ProviderError as e:
                if e.kind is ProviderErrorKind.RATE_LIMITED:
                    log.warning(
                        f"Rate limit detected for {descriptor.name}, trying next provider",
                        error=e.message,
                    )
                else:
                    log.warning(
                        f"{descriptor.name} failed", error_kind=e.kind.value, error=e.message
                    )
                failures.append(FailureRecord(descriptor.name, e.kind, e.message))
                continue
            except Exception as e:
                log.error(f"Unexpected error from provider {descriptor.name}", error=str(e))
                failures.append(
                    FailureRecord(
                        descriptor.name, ProviderErrorKind.UPSTREAM_ERROR, str(e) or type(e).__name__
                    )
                )
                continue

            log.info(
                f"Operation successful with {descriptor.name}",
                duration=round(time.time() - start_time, 3),
                failovers=len(failures),
            )
            return FallbackResult(result=result, provider_name=descriptor.name, failures=failures)

        logger.error(
            "All AI providers failed",
            operation=capability.value,
            attempted=[failure.provider for failure in failures],
        )
        raise OrchestrationExhausted(failures)
