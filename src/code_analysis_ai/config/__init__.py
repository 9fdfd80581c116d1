"""Configuration module"""
from .settings import Settings, get_settings, secret_value, settings

__all__ = ["Settings", "get_settings", "secret_value", "settings"]
