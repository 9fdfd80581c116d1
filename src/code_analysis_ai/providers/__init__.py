from .base import (
    ALL_CAPABILITIES,
    CORE_CAPABILITIES,
    BaseProvider,
    Capability,
    ProviderError,
    ProviderErrorKind,
    ProviderUnsupportedCapability,
)
from .gemini_provider import GeminiProvider
from .groq_provider import GroqProvider
from .huggingface_provider import HuggingFaceProvider
from .orchestrator import FailureRecord, FallbackOrchestrator, FallbackResult
from .registry import ProviderDescriptor, ProviderRegistry, build_default_registry
from .retry_handler import RetryHandler

__all__ = [
    "ALL_CAPABILITIES",
    "CORE_CAPABILITIES",
    "BaseProvider",
    "Capability",
    "ProviderError",
    "ProviderErrorKind",
    "ProviderUnsupportedCapability",
    "GeminiProvider",
    "GroqProvider",
    "HuggingFaceProvider",
    "FailureRecord",
    "FallbackOrchestrator",
    "FallbackResult",
    "ProviderDescriptor",
    "ProviderRegistry",
    "build_default_registry",
    "RetryHandler",
]
