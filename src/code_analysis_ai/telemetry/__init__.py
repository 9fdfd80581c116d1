"""Telemetry module for logging."""

from code_analysis_ai.telemetry.logger import SecretRedactor, setup_logging

__all__ = ["SecretRedactor", "setup_logging"]
