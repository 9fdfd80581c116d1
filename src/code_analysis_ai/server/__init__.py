"""Server module for Code Analysis AI."""

from code_analysis_ai.server.main import create_app, start_server

__all__ = ["create_app", "start_server"]
