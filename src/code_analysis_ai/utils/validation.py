"""Validation and normalization of inbound request data."""

from typing import Any, Dict, List

from code_analysis_ai.exceptions import ValidationException
from code_analysis_ai.schemas.analysis import (
    ANALYSIS_TYPES,
    DEFAULT_ANALYSIS_TYPE,
    DEFAULT_LANGUAGE,
    DEFAULT_PROVIDER,
    PROVIDER_CHOICES,
    SUPPORTED_LANGUAGES,
    AnalysisRequest,
    ProjectInfo,
)

MAX_CODE_SIZE = 2_000_000
MAX_REPORT_RESULTS = 50


def validate_code(code: Any, max_size: int = MAX_CODE_SIZE) -> str:
    """Return the trimmed code or raise ValidationException."""
    if not isinstance(code, str) or not code.strip():
        raise ValidationException("Code is required and must be a non-empty string", field="code")

    if len(code) > max_size:
        raise ValidationException(
            f"Code is too large. Maximum size is {max_size // 1_000_000}MB"
            if max_size >= 1_000_000 and max_size % 1_000_000 == 0
            else f"Code is too large. Maximum size is {max_size} characters",
            field="code",
        )

    return code.strip()


def validate_language(language: Any) -> str:
    """Unknown or missing languages fall back to javascript instead of failing."""
    if not isinstance(language, str):
        return DEFAULT_LANGUAGE
    language = language.strip().lower()
    return language if language in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def validate_analysis_type(analysis_type: Any) -> str:
    if isinstance(analysis_type, str) and analysis_type in ANALYSIS_TYPES:
        return analysis_type
    return DEFAULT_ANALYSIS_TYPE


def validate_provider_type(provider: Any) -> str:
    if isinstance(provider, str) and provider.strip().lower() in PROVIDER_CHOICES:
        return provider.strip().lower()
    return DEFAULT_PROVIDER


def validate_context(context: Any) -> str:
    if context is None:
        return ""
    if not isinstance(context, str):
        raise ValidationException("Context must be a string", field="context")
    return context


def validate_analysis_results(results: Any, max_results: int = MAX_REPORT_RESULTS) -> List[Any]:
    if results is None or not isinstance(results, list):
        raise ValidationException(
            "Analysis results must be provided as an array", field="analysisResults"
        )

    if len(results) == 0:
        raise ValidationException("Analysis results array cannot be empty", field="analysisResults")

    if len(results) > max_results:
        raise ValidationException(
            f"Too many analysis results. Maximum is {max_results}", field="analysisResults"
        )

    return results


def validate_project_info(project_info: Any) -> Dict[str, Any]:
    if project_info is None:
        return {}
    if not isinstance(project_info, dict):
        raise ValidationException("Project info must be an object", field="projectInfo")
    return ProjectInfo.model_validate(project_info).model_dump(exclude_none=True)


def build_analysis_request(
    code: Any,
    language: Any = None,
    analysis_type: Any = None,
    preferred_provider: Any = None,
    max_code_size: int = MAX_CODE_SIZE,
) -> AnalysisRequest:
    """Validate raw fields into an immutable AnalysisRequest."""
    return AnalysisRequest(
        code=validate_code(code, max_code_size),
        language=validate_language(language),
        analysis_type=validate_analysis_type(analysis_type),
        preferred_provider=validate_provider_type(preferred_provider),
    )


__all__ = [
    "MAX_CODE_SIZE",
    "MAX_REPORT_RESULTS",
    "validate_code",
    "validate_language",
    "validate_analysis_type",
    "validate_provider_type",
    "validate_context",
    "validate_analysis_results",
    "validate_project_info",
    "build_analysis_request",
]
