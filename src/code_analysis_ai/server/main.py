"""FastAPI application factory and server entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

from code_analysis_ai import __version__
from code_analysis_ai.api import create_analysis_router
from code_analysis_ai.api.responses import (
    error_response,
    server_error_response,
    validation_error_response,
)
from code_analysis_ai.config.settings import Settings, get_settings
from code_analysis_ai.exceptions import AnalysisServiceException, ValidationException
from code_analysis_ai.providers.orchestrator import FallbackOrchestrator
from code_analysis_ai.providers.registry import ProviderRegistry, build_default_registry
from code_analysis_ai.server.middleware import RequestIdMiddleware
from code_analysis_ai.services.analysis_service import AnalysisService
from code_analysis_ai.telemetry.logger import setup_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle."""
    settings: Settings = app.state.settings
    registry: ProviderRegistry = app.state.registry

    logger.info(
        "Starting Code Analysis AI",
        version=__version__,
        environment=settings.environment,
        providers=registry.configured(),
    )
    if not any(registry.configured().values()):
        logger.warning("No AI provider API keys configured; every analysis will fail")

    yield

    logger.info("Shutting down Code Analysis AI")
    await registry.aclose()


def create_app(
    settings: Optional[Settings] = None, registry: Optional[ProviderRegistry] = None
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use, defaults to the cached environment settings
        registry: Provider registry, defaults to Gemini, Groq and Hugging Face
            built from ``settings``
    """
    settings = settings or get_settings()
    setup_logging(settings)

    registry = registry if registry is not None else build_default_registry(settings)
    orchestrator = FallbackOrchestrator(registry)

    app = FastAPI(
        title=settings.app_name,
        description="Code analysis API with ordered fallback across Gemini, Groq and Hugging Face",
        version=__version__,
        redoc_url=None if settings.is_production else "/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.registry = registry
    app.state.analysis_service = AnalysisService(orchestrator)

    # Rate limiting: defaults cover app-level routes, analysis routes carry their own limit
    rate_limit = f"{settings.rate_limit_requests}/minute"
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[rate_limit],
        enabled=settings.rate_limit_enabled,
    )
    app.state.limiter = limiter

    # Add middleware (order matters - reverse order of execution)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SlowAPIMiddleware)

    expose_errors = not settings.is_production

    @app.exception_handler(RateLimitExceeded)
    def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        logger.warning("Rate limit exceeded", path=request.url.path, limit=str(exc.detail))
        return error_response(
            "Too Many Requests",
            "Too many requests from this IP, please try again later.",
            status.HTTP_429_TOO_MANY_REQUESTS,
        )

    @app.exception_handler(ValidationException)
    async def validation_handler(request: Request, exc: ValidationException):
        logger.info("Request rejected", path=request.url.path, reason=exc.message, field=exc.field)
        return validation_error_response(exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info("Malformed request body", path=request.url.path, errors=str(exc.errors()))
        return validation_error_response("Request body must be a JSON object")

    @app.exception_handler(AnalysisServiceException)
    async def service_exception_handler(request: Request, exc: AnalysisServiceException):
        """Exhausted orchestration and other service errors."""
        logger.error(
            "Analysis request failed",
            path=request.url.path,
            error_code=exc.error_code,
            error=exc.message,
            details=exc.details,
        )
        if exc.status_code < 500:
            return error_response(HTTPStatus(exc.status_code).phrase, exc.message, exc.status_code)
        return server_error_response(exc.message, expose_message=expose_errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return error_response(
                "Not Found", "The requested endpoint does not exist", exc.status_code
            )
        return error_response(HTTPStatus(exc.status_code).phrase, str(exc.detail), exc.status_code)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error("Unexpected error", path=request.url.path, error=str(exc), exc_info=True)
        return server_error_response(str(exc), expose_message=expose_errors)

    app.include_router(
        create_analysis_router(limiter, rate_limit), prefix=settings.api_prefix, tags=["analysis"]
    )

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {
            "status": "ok",
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
        }

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "Code Analysis AI API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
            "api": settings.api_prefix,
        }

    return app


def start_server(settings: Optional[Settings] = None) -> None:
    """Start the server programmatically."""
    settings = settings or get_settings()
    uvicorn.run(
        "code_analysis_ai.server.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=settings.reload if settings.is_development else False,
        workers=settings.workers if not settings.reload else 1,
        access_log=settings.is_development,
    )


if __name__ == "__main__":
    start_server()
