"""Service layer."""

from .analysis_service import AnalysisService

__all__ = ["AnalysisService"]
