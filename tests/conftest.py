"""Pytest configuration and fixtures."""

import os

# Ensure test environment is set before the settings module is imported
os.environ["ENVIRONMENT"] = "testing"
for _key in ("GEMINI_API_KEY", "GROQ_API_KEY", "HUGGINGFACE_API_KEY"):
    os.environ.pop(_key, None)

import pytest
from fastapi.testclient import TestClient

from code_analysis_ai.config.settings import Settings
from code_analysis_ai.providers.base import (
    CORE_CAPABILITIES,
    BaseProvider,
    Capability,
    ProviderError,
    ProviderErrorKind,
)
from code_analysis_ai.providers.orchestrator import FallbackOrchestrator
from code_analysis_ai.providers.registry import ProviderDescriptor, ProviderRegistry
from code_analysis_ai.providers.retry_handler import RetryHandler
from code_analysis_ai.server.main import create_app

SAMPLE_ANALYSIS = '{"quality_score":8,"issues":[],"summary":"ok","recommendations":[]}'


class RecordingSleep:
    """Awaitable stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


class FakeProvider(BaseProvider):
    """Provider whose remote call returns or raises scripted outcomes.

    The last scripted outcome repeats once the script is exhausted.
    """

    def __init__(
        self,
        name,
        outcomes=("ok",),
        available=True,
        capabilities=CORE_CAPABILITIES,
        retry_handler=None,
    ):
        super().__init__(
            "test-key" if available else None,
            retry_handler=retry_handler or RetryHandler(sleep=RecordingSleep()),
        )
        self.name = name
        self.capabilities = frozenset(capabilities)
        self.outcomes = list(outcomes)
        self.calls = []
        self.closed = False

    async def _generate(self, prompt, capability):
        self.calls.append(capability)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def aclose(self):
        self.closed = True


def provider_error(name, message="upstream exploded", kind=ProviderErrorKind.UPSTREAM_ERROR):
    return ProviderError(f"{name} {message}", provider=name, kind=kind)


def rate_limited(name):
    return provider_error(name, "API error: 429 quota exceeded", ProviderErrorKind.RATE_LIMITED)


def make_registry(*providers, priorities=None):
    priorities = priorities or range(1, len(providers) + 1)
    return ProviderRegistry(
        ProviderDescriptor(name=provider.name, provider=provider, priority=priority)
        for provider, priority in zip(providers, priorities)
    )


@pytest.fixture
def test_settings():
    """Settings isolated from the host environment and .env files."""
    return Settings(
        _env_file=None,
        environment="testing",
        log_level="WARNING",
        rate_limit_enabled=False,
        gemini_api_key=None,
        groq_api_key=None,
        huggingface_api_key=None,
    )


@pytest.fixture
def providers():
    """Three available providers P1..P3 that all succeed."""
    return [FakeProvider(f"P{i}", outcomes=[f"result from P{i}"]) for i in (1, 2, 3)]


@pytest.fixture
def registry(providers):
    return make_registry(*providers)


@pytest.fixture
def orchestrator(registry):
    return FallbackOrchestrator(registry)


@pytest.fixture
def single_provider():
    return FakeProvider("Gemini", outcomes=[SAMPLE_ANALYSIS], capabilities=list(Capability))


@pytest.fixture
def app(test_settings, single_provider):
    return create_app(test_settings, make_registry(single_provider))


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
