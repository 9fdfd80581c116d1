"""
Configuration module for the Code Analysis AI backend.
Handles environment variables and application settings.
"""

import json
from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application
    app_name: str = Field("Code Analysis AI", description="Application name")
    environment: str = Field(
        "development", description="Environment (development, staging, production, testing)"
    )
    debug: bool = Field(False, description="Debug mode")
    log_level: str = Field("INFO", description="Logging level")
    log_format: str = Field("console", description="Log renderer (json or console)")
    api_prefix: str = Field("/api/analysis", description="Prefix for the analysis routes")

    # Server
    host: str = Field("0.0.0.0", description="Server host")
    port: int = Field(3001, ge=1, le=65535, description="Server port")
    reload: bool = Field(False, description="Auto-reload on code changes")
    workers: int = Field(1, ge=1, description="Number of worker processes")

    # CORS
    cors_origins: Annotated[List[str], NoDecode] = Field(
        default=["http://localhost:5173", "http://localhost:5174"],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = Field(True, description="Allow credentials in CORS")

    # Provider credentials
    gemini_api_key: Optional[SecretStr] = Field(None, description="Google Gemini API key")
    groq_api_key: Optional[SecretStr] = Field(None, description="Groq API key")
    huggingface_api_key: Optional[SecretStr] = Field(None, description="Hugging Face API key")

    # Provider models and endpoints
    gemini_model: str = Field("gemini-2.5-flash", description="Gemini model")
    gemini_base_url: str = Field(
        "https://generativelanguage.googleapis.com/v1beta", description="Gemini REST base URL"
    )
    groq_model: str = Field("llama-3.3-70b-versatile", description="Groq model")
    groq_base_url: str = Field(
        "https://api.groq.com/openai/v1", description="Groq OpenAI-compatible base URL"
    )
    huggingface_model: str = Field("bigcode/starcoder2-15b", description="Hugging Face model")
    huggingface_base_url: str = Field(
        "https://api-inference.huggingface.co/models", description="Hugging Face inference URL"
    )

    # Request configuration
    request_timeout: float = Field(30.0, gt=0, description="Provider request timeout in seconds")
    max_retries: int = Field(3, ge=1, description="Attempts per provider on rate limiting")
    retry_base_delay: float = Field(1.0, ge=0, description="Initial backoff delay in seconds")

    # Input limits
    max_code_size: int = Field(2_000_000, ge=1, description="Maximum code length in characters")
    max_report_results: int = Field(50, ge=1, description="Maximum analysis results per report")

    # Rate limiting
    rate_limit_enabled: bool = Field(True, description="Enable per-client rate limiting")
    rate_limit_requests: int = Field(30, ge=1, description="Max requests per minute")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from a JSON array, comma separated string or list."""
        if isinstance(v, str):
            if v.startswith("["):
                try:
                    return json.loads(v)
                except (json.JSONDecodeError, ValueError):
                    pass
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value."""
        allowed = ["development", "staging", "production", "testing"]
        v = v.lower()
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        v = v.lower()
        if v not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def has_gemini_key(self) -> bool:
        return bool(secret_value(self.gemini_api_key))

    @property
    def has_groq_key(self) -> bool:
        return bool(secret_value(self.groq_api_key))

    @property
    def has_huggingface_key(self) -> bool:
        return bool(secret_value(self.huggingface_api_key))


def secret_value(secret: Optional[SecretStr]) -> Optional[str]:
    """Unwrap an optional secret, treating blank values as missing."""
    if secret is None:
        return None
    value = secret.get_secret_value().strip()
    return value or None


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings instance
    """
    return Settings()


# Create a global settings instance
settings = get_settings()
