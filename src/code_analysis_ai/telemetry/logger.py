"""Structured logging configuration with request correlation and secret redaction."""

import logging
import re
import sys
from typing import Any, Optional

import orjson
import structlog
from structlog.processors import CallsiteParameter

from code_analysis_ai.config.settings import Settings, get_settings


class SecretRedactor:
    """Redact provider credentials that end up in log messages."""

    GEMINI_KEY_PATTERN = re.compile(r"\bAIza[0-9A-Za-z_-]{20,}\b")
    GROQ_KEY_PATTERN = re.compile(r"\bgsk_[0-9A-Za-z]{20,}\b")
    HUGGINGFACE_KEY_PATTERN = re.compile(r"\bhf_[0-9A-Za-z]{20,}\b")
    BEARER_PATTERN = re.compile(r"(Bearer\s+)[\w.-]{10,}", re.IGNORECASE)
    QUERY_KEY_PATTERN = re.compile(r"([?&]key=)[\w-]+", re.IGNORECASE)

    @classmethod
    def redact(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value

        value = cls.GEMINI_KEY_PATTERN.sub("[API_KEY_REDACTED]", value)
        value = cls.GROQ_KEY_PATTERN.sub("[API_KEY_REDACTED]", value)
        value = cls.HUGGINGFACE_KEY_PATTERN.sub("[API_KEY_REDACTED]", value)
        value = cls.BEARER_PATTERN.sub(r"\1[REDACTED]", value)
        value = cls.QUERY_KEY_PATTERN.sub(r"\1[REDACTED]", value)
        return value


def redact_sensitive_data(logger, method_name, event_dict):
    """Redact credentials from every string value of the event."""
    for key, value in event_dict.items():
        if key in ("timestamp", "level", "logger", "request_id"):
            continue
        if isinstance(value, str):
            event_dict[key] = SecretRedactor.redact(value)
        elif isinstance(value, dict):
            event_dict[key] = {k: SecretRedactor.redact(v) for k, v in value.items()}
    return event_dict


def _orjson_dumps(obj: Any, **kwargs: Any) -> str:
    return orjson.dumps(obj, default=str).decode()


def setup_logging(
    settings: Optional[Settings] = None,
    level: Optional[str] = None,
    format: Optional[str] = None,
) -> None:
    """Configure structlog on top of stdlib logging."""
    settings = settings or get_settings()
    log_level = (level or settings.log_level).upper()
    log_format = format or settings.log_format

    processors = [
        structlog.contextvars.merge_contextvars,  # request_id bound by middleware
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.is_production:
        processors.append(redact_sensitive_data)

    processors.extend(
        [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    CallsiteParameter.FILENAME,
                    CallsiteParameter.FUNC_NAME,
                    CallsiteParameter.LINENO,
                ]
            ),
            structlog.processors.format_exc_info,
        ]
    )

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer(serializer=_orjson_dumps))
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level),
        force=True,
    )

    # Suppress noisy loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
