"""Analysis operations built on top of the fallback orchestrator."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog

from code_analysis_ai.providers.base import Capability
from code_analysis_ai.providers.orchestrator import FallbackOrchestrator, FallbackResult
from code_analysis_ai.schemas.analysis import AnalysisOutcome, AnalysisRequest, OutcomeMetadata

logger = structlog.get_logger()


class AnalysisService:
    """Thin operation wrappers: capture arguments, orchestrate, wrap provenance."""

    def __init__(self, orchestrator: FallbackOrchestrator):
        self.orchestrator = orchestrator

    async def analyze_code(self, request: AnalysisRequest) -> AnalysisOutcome:
        """Analyze code, honouring the caller's preferred provider."""
        fallback = await self.orchestrator.execute(
            lambda provider: provider.analyze_code(
                request.code, request.language, request.analysis_type
            ),
            capability=Capability.ANALYZE,
            preferred_provider=request.preferred_provider,
        )
        return self._outcome(fallback, request.language, request.analysis_type)

    async def explain_code(self, code: str, language: str = "javascript") -> AnalysisOutcome:
        fallback = await self.orchestrator.execute(
            lambda provider: provider.explain_code(code, language),
            capability=Capability.EXPLAIN,
        )
        return self._outcome(fallback, language, "explanation")

    async def suggest_improvements(
        self, code: str, language: str = "javascript", context: str = ""
    ) -> AnalysisOutcome:
        fallback = await self.orchestrator.execute(
            lambda provider: provider.suggest_improvements(code, language, context),
            capability=Capability.SUGGEST,
        )
        return self._outcome(fallback, language, "improvements")

    async def generate_report(
        self, analysis_results: List[Any], project_info: Optional[Dict[str, Any]] = None
    ) -> AnalysisOutcome:
        """Aggregate earlier analyses into a markdown report (report-capable providers only)."""
        fallback = await self.orchestrator.execute(
            lambda provider: provider.generate_report(analysis_results, project_info or {}),
            capability=Capability.REPORT,
        )
        return self._outcome(fallback, "multiple", "report")

    def available_provider_names(self) -> List[str]:
        return self.orchestrator.available_provider_names()

    def provider_configs(self) -> Dict[str, bool]:
        return self.orchestrator.registry.configured()

    @staticmethod
    def _outcome(fallback: FallbackResult[str], language: str, analysis_type: str) -> AnalysisOutcome:
        # Timestamp is taken at completion, after the orchestrator returned.
        timestamp = datetime.now(timezone.utc).isoformat()
        logger.info(
            "Analysis completed",
            provider=fallback.provider_name,
            analysis_type=analysis_type,
            failovers=len(fallback.failures),
        )
        return AnalysisOutcome(
            analysis=fallback.result,
            provider=fallback.provider_name,
            metadata=OutcomeMetadata(
                language=language, analysis_type=analysis_type, timestamp=timestamp
            ),
        )
