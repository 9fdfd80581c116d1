"""Tests for the analysis service operation wrappers."""

from datetime import datetime

import pytest
from conftest import SAMPLE_ANALYSIS, FakeProvider, make_registry

from code_analysis_ai.providers.base import Capability
from code_analysis_ai.providers.orchestrator import FallbackOrchestrator
from code_analysis_ai.services.analysis_service import AnalysisService
from code_analysis_ai.utils.validation import build_analysis_request


def make_service(*providers):
    return AnalysisService(FallbackOrchestrator(make_registry(*providers)))


@pytest.mark.asyncio
async def test_analyze_code_outcome():
    provider = FakeProvider("Gemini", outcomes=[SAMPLE_ANALYSIS])
    request = build_analysis_request("console.log(1)", "javascript", "general", "auto")

    outcome = await make_service(provider).analyze_code(request)

    assert outcome.analysis == SAMPLE_ANALYSIS
    assert outcome.provider == "Gemini"
    assert outcome.metadata.language == "javascript"
    assert outcome.metadata.analysis_type == "general"
    assert datetime.fromisoformat(outcome.metadata.timestamp).tzinfo is not None
    assert outcome.model_dump(by_alias=True)["metadata"]["analysisType"] == "general"


@pytest.mark.asyncio
async def test_analyze_code_honours_preference():
    gemini, groq = FakeProvider("Gemini"), FakeProvider("Groq")
    request = build_analysis_request("x", preferred_provider="groq")

    outcome = await make_service(gemini, groq).analyze_code(request)

    assert outcome.provider == "Groq"
    assert gemini.calls == []


@pytest.mark.asyncio
async def test_operation_kinds_in_metadata():
    provider = FakeProvider("Gemini", capabilities=list(Capability))
    service = make_service(provider)

    explanation = await service.explain_code("x = 1", "python")
    improvements = await service.suggest_improvements("x = 1", "python", "naming")
    report = await service.generate_report([{"analysis": "ok"}], {"name": "MyApp"})

    assert explanation.metadata.analysis_type == "explanation"
    assert improvements.metadata.analysis_type == "improvements"
    assert report.metadata.analysis_type == "report"
    assert report.metadata.language == "multiple"
    assert provider.calls == [Capability.EXPLAIN, Capability.SUGGEST, Capability.REPORT]


def test_provider_status():
    service = make_service(FakeProvider("Gemini", available=False), FakeProvider("Groq"))

    assert service.available_provider_names() == ["Groq"]
    assert service.provider_configs() == {"gemini": False, "groq": True}
