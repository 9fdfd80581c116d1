"""
Base provider abstract class and common error types for AI providers.
"""

import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from . import prompts
from .retry_handler import RetryHandler

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    """Operations a provider adapter can perform."""

    ANALYZE = "analyze"
    EXPLAIN = "explain"
    SUGGEST = "suggest"
    REPORT = "report"


CORE_CAPABILITIES: FrozenSet[Capability] = frozenset(
    {Capability.ANALYZE, Capability.EXPLAIN, Capability.SUGGEST}
)
ALL_CAPABILITIES: FrozenSet[Capability] = CORE_CAPABILITIES | {Capability.REPORT}


class ProviderErrorKind(str, Enum):
    """Failure classes decided at the adapter boundary."""

    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    NETWORK_FAILURE = "network_failure"
    MALFORMED_RESPONSE = "malformed_response"
    UPSTREAM_ERROR = "upstream_error"
    UNSUPPORTED = "unsupported"


class ProviderError(Exception):
    """Base exception for provider-related errors."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        kind: ProviderErrorKind = ProviderErrorKind.UPSTREAM_ERROR,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize provider error.

        Args:
            message: Error message
            provider: Provider name
            kind: Structured failure class
            status_code: HTTP status code if applicable
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.kind = kind
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)

    @property
    def retryable(self) -> bool:
        """Only rate limiting is worth retrying against the same provider."""
        return self.kind is ProviderErrorKind.RATE_LIMITED

    def __repr__(self) -> str:
        return f"{type(self).__name__}(provider={self.provider!r}, kind={self.kind.value!r}, message={self.message!r})"


class ProviderUnsupportedCapability(ProviderError):
    """The provider permanently lacks the requested operation."""

    def __init__(self, capability: Capability, provider: Optional[str] = None):
        label = "Report generation" if capability is Capability.REPORT else capability.value
        super().__init__(
            f"{label.capitalize()} not supported by {provider or 'this provider'}",
            provider=provider,
            kind=ProviderErrorKind.UNSUPPORTED,
        )
        self.capability = capability


class BaseProvider(ABC):
    """Abstract base class for AI providers.

    Subclasses implement a single remote round trip in :meth:`_generate` and normalize
    every failure into a :class:`ProviderError`. Prompt building, credential checks,
    rate-limit backoff and logging live here so all adapters behave the same way.
    """

    name: str = "base"
    capabilities: FrozenSet[Capability] = CORE_CAPABILITIES

    def __init__(
        self,
        api_key: Optional[str],
        timeout: float = 30.0,
        retry_handler: Optional[RetryHandler] = None,
    ):
        """
        Initialize the provider.

        Args:
            api_key: API key for the provider (None or blank means unavailable)
            timeout: Request timeout in seconds
            retry_handler: Backoff policy for rate-limited calls
        """
        self.api_key = (api_key or "").strip() or None
        self.timeout = timeout
        self.retry_handler = retry_handler or RetryHandler()

    def is_available(self) -> bool:
        """True iff a non-empty credential is configured. No I/O."""
        return bool(self.api_key)

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    @abstractmethod
    async def _generate(self, prompt: str, capability: Capability) -> str:
        """
        Perform one remote call and return the generated text.

        Args:
            prompt: Fully rendered prompt
            capability: Operation being served (adapters may tune parameters per operation)

        Returns:
            str: Raw response text

        Raises:
            ProviderError: If the remote call fails for any reason
        """

    def build_analysis_prompt(self, code: str, language: str, analysis_type: str) -> str:
        return prompts.build_analysis_prompt(code, language, analysis_type)

    def build_explanation_prompt(self, code: str, language: str) -> str:
        return prompts.build_explanation_prompt(code, language)

    def build_improvement_prompt(self, code: str, language: str, context: str) -> str:
        return prompts.build_improvement_prompt(code, language, context)

    async def analyze_code(
        self, code: str, language: str = "javascript", analysis_type: str = "general"
    ) -> str:
        """Analyze code for quality, security, performance or maintainability."""
        prompt = self.build_analysis_prompt(code, language, analysis_type)
        return await self._request(prompt, Capability.ANALYZE)

    async def explain_code(self, code: str, language: str = "javascript") -> str:
        """Explain what a piece of code does."""
        prompt = self.build_explanation_prompt(code, language)
        return await self._request(prompt, Capability.EXPLAIN)

    async def suggest_improvements(
        self, code: str, language: str = "javascript", context: str = ""
    ) -> str:
        """Suggest improvements, with free-text context appended to the prompt."""
        prompt = self.build_improvement_prompt(code, language, context)
        return await self._request(prompt, Capability.SUGGEST)

    async def generate_report(
        self, results: List[Any], project_info: Optional[Dict[str, Any]] = None
    ) -> str:
        """Aggregate prior analysis outputs into a narrative report."""
        if not self.supports(Capability.REPORT):
            raise ProviderUnsupportedCapability(Capability.REPORT, provider=self.name)
        prompt = prompts.build_report_prompt(results, project_info)
        return await self._request(prompt, Capability.REPORT)

    async def aclose(self) -> None:
        """Release network resources held by the provider."""

    async def _request(self, prompt: str, capability: Capability) -> str:
        if not self.is_available():
            raise ProviderError(
                f"{self.name} client not initialized - missing API key",
                provider=self.name,
                kind=ProviderErrorKind.UNAUTHORIZED,
            )

        self._log_request(capability, prompt)
        start_time = time.time()
        try:
            text = await self.retry_handler.execute(self._generate, prompt, capability)
        except ProviderError as e:
            self._log_error(e, capability)
            raise
        self._log_response(capability, text, time.time() - start_time)
        return text

    def _error(
        self,
        message: str,
        kind: ProviderErrorKind,
        status_code: Optional[int] = None,
        **details: Any,
    ) -> ProviderError:
        return ProviderError(
            f"{self.name} {message}",
            provider=self.name,
            kind=kind,
            status_code=status_code,
            details=details or None,
        )

    def _log_request(self, capability: Capability, prompt: str) -> None:
        logger.info(
            f"Provider {self.name} request",
            extra={
                "provider": self.name,
                "operation": capability.value,
                "prompt_chars": len(prompt),
            },
        )

    def _log_response(self, capability: Capability, text: str, duration: float) -> None:
        logger.info(
            f"Provider {self.name} response",
            extra={
                "provider": self.name,
                "operation": capability.value,
                "response_chars": len(text),
                "duration": duration,
            },
        )

    def _log_error(self, error: ProviderError, capability: Capability) -> None:
        logger.error(
            f"Provider {self.name} error",
            extra={
                "provider": self.name,
                "operation": capability.value,
                "error_kind": error.kind.value,
                "status_code": error.status_code,
                "error_message": error.message,
            },
        )
