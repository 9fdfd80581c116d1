"""HTTP API for code analysis."""

from .analysis import create_analysis_router

__all__ = ["create_analysis_router"]
