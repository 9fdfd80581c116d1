"""Code Analysis AI - multi-provider LLM code analysis backend."""

__version__ = "1.0.0"

__author__ = "Code Analysis AI Contributors"


def get_version():
    return __version__


__all__ = ["__version__", "__author__", "get_version"]
