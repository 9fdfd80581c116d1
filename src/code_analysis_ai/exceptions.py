"""Custom exceptions for the Code Analysis AI backend."""

from typing import Any, Dict, Optional, Sequence


class AnalysisServiceException(Exception):
    """Base exception for application-level errors surfaced to API callers."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "INTERNAL_ERROR"
        self.status_code = status_code
        self.details = details or {}


class ValidationException(AnalysisServiceException):
    """Malformed, missing or oversized request input. Never retried."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, error_code="VALIDATION_ERROR", status_code=400, **kwargs)
        self.field = field
        if field:
            self.details["field"] = field


class OrchestrationExhausted(AnalysisServiceException):
    """Every candidate provider failed, or none was available."""

    NO_PROVIDERS_MESSAGE = "No AI providers available"

    def __init__(self, failures: Sequence[Any] = (), **kwargs):
        self.failures = list(failures)
        self.last_message = self.failures[-1].message if self.failures else None
        if self.last_message is not None:
            message = f"All AI providers failed. Last error: {self.last_message}"
        else:
            message = self.NO_PROVIDERS_MESSAGE
        super().__init__(
            message, error_code="ORCHESTRATION_EXHAUSTED", status_code=500, **kwargs
        )
        self.details["attempted_providers"] = [failure.provider for failure in self.failures]


__all__ = [
    "AnalysisServiceException",
    "ValidationException",
    "OrchestrationExhausted",
]
