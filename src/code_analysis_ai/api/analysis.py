"""Analysis API routes."""

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter

from code_analysis_ai.config.settings import Settings
from code_analysis_ai.schemas.analysis import (
    AnalyzeBody,
    ExplainBody,
    ImproveBody,
    ProviderStatus,
    ReportBody,
)
from code_analysis_ai.services.analysis_service import AnalysisService
from code_analysis_ai.utils.validation import (
    build_analysis_request,
    validate_analysis_results,
    validate_code,
    validate_context,
    validate_language,
    validate_project_info,
)

from .responses import success_response

logger = structlog.get_logger()


def get_analysis_service(request: Request) -> AnalysisService:
    """Service built by the application factory."""
    return request.app.state.analysis_service


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def create_analysis_router(limiter: Limiter, rate_limit: str) -> APIRouter:
    """Build the analysis routes, each limited per client by ``limiter``.

    Args:
        limiter: Limiter owned by the application
        rate_limit: Limit string such as ``"30/minute"``
    """
    router = APIRouter(
        responses={
            400: {"description": "Validation error"},
            429: {"description": "Rate limit exceeded"},
            500: {"description": "All providers failed or none available"},
        }
    )
    limit = limiter.limit(rate_limit)

    @router.post("/analyze")
    @limit
    async def analyze_code(
        request: Request,
        body: AnalyzeBody,
        service: AnalysisService = Depends(get_analysis_service),  # noqa: B008
        settings: Settings = Depends(get_app_settings),  # noqa: B008
    ) -> JSONResponse:
        """Analyze code with the preferred provider first, falling back by priority."""
        analysis_request = build_analysis_request(
            body.code,
            body.language,
            body.analysis_type,
            body.preferred_provider,
            max_code_size=settings.max_code_size,
        )
        logger.info(
            "Processing analysis request",
            language=analysis_request.language,
            analysis_type=analysis_request.analysis_type,
            preferred_provider=analysis_request.preferred_provider,
            code_chars=len(analysis_request.code),
        )
        outcome = await service.analyze_code(analysis_request)
        return success_response(outcome)

    @router.post("/explain")
    @limit
    async def explain_code(
        request: Request,
        body: ExplainBody,
        service: AnalysisService = Depends(get_analysis_service),  # noqa: B008
        settings: Settings = Depends(get_app_settings),  # noqa: B008
    ) -> JSONResponse:
        code = validate_code(body.code, settings.max_code_size)
        outcome = await service.explain_code(code, validate_language(body.language))
        return success_response(outcome)

    @router.post("/improve")
    @limit
    async def suggest_improvements(
        request: Request,
        body: ImproveBody,
        service: AnalysisService = Depends(get_analysis_service),  # noqa: B008
        settings: Settings = Depends(get_app_settings),  # noqa: B008
    ) -> JSONResponse:
        code = validate_code(body.code, settings.max_code_size)
        outcome = await service.suggest_improvements(
            code, validate_language(body.language), validate_context(body.context)
        )
        return success_response(outcome)

    @router.post("/report")
    @limit
    async def generate_report(
        request: Request,
        body: ReportBody,
        service: AnalysisService = Depends(get_analysis_service),  # noqa: B008
        settings: Settings = Depends(get_app_settings),  # noqa: B008
    ) -> JSONResponse:
        """Generate a narrative report from earlier analysis results."""
        results = validate_analysis_results(body.analysis_results, settings.max_report_results)
        project_info = validate_project_info(body.project_info)
        logger.info("Processing report request", results_count=len(results))
        outcome = await service.generate_report(results, project_info)
        return success_response(outcome)

    @router.get("/providers")
    @router.get("/status", include_in_schema=False)
    @limit
    async def provider_status(
        request: Request,
        service: AnalysisService = Depends(get_analysis_service),  # noqa: B008
    ) -> JSONResponse:
        """Available providers in attempt order, plus which credentials are configured."""
        status = ProviderStatus(
            available_providers=service.available_provider_names(),
            provider_configs=service.provider_configs(),
        )
        return success_response(status)

    return router
