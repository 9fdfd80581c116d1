"""Schemas for the analysis API."""

from .analysis import (
    ANALYSIS_TYPES,
    PROVIDER_CHOICES,
    SUPPORTED_LANGUAGES,
    AnalysisOutcome,
    AnalysisRequest,
    AnalyzeBody,
    ExplainBody,
    ImproveBody,
    OutcomeMetadata,
    ProjectInfo,
    ProviderStatus,
    ReportBody,
)

__all__ = [
    "ANALYSIS_TYPES",
    "PROVIDER_CHOICES",
    "SUPPORTED_LANGUAGES",
    "AnalysisOutcome",
    "AnalysisRequest",
    "AnalyzeBody",
    "ExplainBody",
    "ImproveBody",
    "OutcomeMetadata",
    "ProjectInfo",
    "ProviderStatus",
    "ReportBody",
]
