"""Tests for the Gemini, Groq and Hugging Face adapters."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest
from conftest import RecordingSleep

from code_analysis_ai.providers.base import (
    Capability,
    ProviderError,
    ProviderErrorKind,
    ProviderUnsupportedCapability,
)
from code_analysis_ai.providers.gemini_provider import GeminiProvider
from code_analysis_ai.providers.groq_provider import GroqProvider
from code_analysis_ai.providers.huggingface_provider import FALLBACK_TEXT, HuggingFaceProvider
from code_analysis_ai.providers.retry_handler import RetryHandler


def gemini_body(text):
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def make_gemini(handler, api_key="AIza-test-key", sleep=None):
    return GeminiProvider(
        api_key,
        transport=httpx.MockTransport(handler),
        retry_handler=RetryHandler(sleep=sleep or RecordingSleep()),
    )


def make_huggingface(handler, api_key="hf_test"):
    return HuggingFaceProvider(
        api_key,
        transport=httpx.MockTransport(handler),
        retry_handler=RetryHandler(sleep=RecordingSleep()),
    )


class TestAvailability:
    @pytest.mark.parametrize("api_key", [None, "", "   "])
    def test_blank_key_is_unavailable(self, api_key):
        assert not GeminiProvider(api_key).is_available()
        assert not GroqProvider(api_key).is_available()
        assert not HuggingFaceProvider(api_key).is_available()

    def test_key_makes_provider_available(self):
        assert GeminiProvider("key").is_available()
        assert GroqProvider("key").is_available()
        assert HuggingFaceProvider("key").is_available()

    def test_only_gemini_generates_reports(self):
        assert GeminiProvider("key").supports(Capability.REPORT)
        assert not GroqProvider("key").supports(Capability.REPORT)
        assert not HuggingFaceProvider("key").supports(Capability.REPORT)


class TestGeminiProvider:
    @pytest.mark.asyncio
    async def test_analyze_code_sends_prompt(self):
        captured = {}

        def handler(request):
            captured["url"] = str(request.url)
            captured["key"] = request.headers["x-goog-api-key"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=gemini_body('{"quality_score": 9}'))

        provider = make_gemini(handler)
        result = await provider.analyze_code("console.log(1)", "javascript", "security")

        assert result == '{"quality_score": 9}'
        assert captured["url"].endswith("/models/gemini-2.5-flash:generateContent")
        assert captured["key"] == "AIza-test-key"
        prompt = captured["body"]["contents"][0]["parts"][0]["text"]
        assert "console.log(1)" in prompt
        assert "security" in prompt.lower()

    @pytest.mark.asyncio
    async def test_generate_report(self):
        def handler(request):
            prompt = json.loads(request.content)["contents"][0]["parts"][0]["text"]
            assert "MyApp" in prompt
            return httpx.Response(200, json=gemini_body("# Report"))

        provider = make_gemini(handler)
        assert await provider.generate_report([{"analysis": "ok"}], {"name": "MyApp"}) == "# Report"

    @pytest.mark.asyncio
    async def test_rate_limit_retried_then_raised(self):
        calls = []
        sleep = RecordingSleep()

        def handler(request):
            calls.append(request)
            return httpx.Response(
                429, json={"error": {"message": "Quota exceeded", "status": "RESOURCE_EXHAUSTED"}}
            )

        provider = make_gemini(handler, sleep=sleep)
        with pytest.raises(ProviderError) as exc_info:
            await provider.explain_code("x", "python")

        assert len(calls) == 3
        assert sleep.delays == [1.0, 2.0]
        assert exc_info.value.kind is ProviderErrorKind.RATE_LIMITED
        assert exc_info.value.message == "Gemini API error: 429 Quota exceeded"

    @pytest.mark.asyncio
    async def test_resource_exhausted_status_is_rate_limit(self):
        def handler(request):
            return httpx.Response(
                400, json={"error": {"message": "quota", "status": "RESOURCE_EXHAUSTED"}}
            )

        with pytest.raises(ProviderError) as exc_info:
            await make_gemini(handler).analyze_code("x")
        assert exc_info.value.retryable

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code,kind",
        [
            (401, ProviderErrorKind.UNAUTHORIZED),
            (403, ProviderErrorKind.UNAUTHORIZED),
            (500, ProviderErrorKind.UPSTREAM_ERROR),
            (503, ProviderErrorKind.UPSTREAM_ERROR),
        ],
    )
    async def test_status_classification(self, status_code, kind):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(status_code, json={"error": {"message": "nope"}})

        with pytest.raises(ProviderError) as exc_info:
            await make_gemini(handler).analyze_code("x")

        assert exc_info.value.kind is kind
        assert exc_info.value.status_code == status_code
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_network_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ProviderError) as exc_info:
            await make_gemini(handler).analyze_code("x")
        assert exc_info.value.kind is ProviderErrorKind.NETWORK_FAILURE

    @pytest.mark.asyncio
    async def test_timeout_is_network_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(ProviderError) as exc_info:
            await make_gemini(handler).analyze_code("x")
        assert exc_info.value.kind is ProviderErrorKind.NETWORK_FAILURE
        assert "timed out" in exc_info.value.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"candidates": []},
            {"promptFeedback": {"blockReason": "SAFETY"}},
            {"candidates": [{"content": {"parts": [{"text": ""}]}}]},
            {"candidates": [{"finishReason": "STOP"}]},
        ],
    )
    async def test_malformed_responses(self, body):
        with pytest.raises(ProviderError) as exc_info:
            await make_gemini(lambda request: httpx.Response(200, json=body)).analyze_code("x")
        assert exc_info.value.kind is ProviderErrorKind.MALFORMED_RESPONSE

    @pytest.mark.asyncio
    async def test_invalid_json_body(self):
        def handler(request):
            return httpx.Response(200, content=b"<html>oops</html>")

        with pytest.raises(ProviderError) as exc_info:
            await make_gemini(handler).analyze_code("x")
        assert exc_info.value.kind is ProviderErrorKind.MALFORMED_RESPONSE

    @pytest.mark.asyncio
    async def test_missing_key_never_hits_network(self):
        handler = MagicMock()
        with pytest.raises(ProviderError) as exc_info:
            await make_gemini(handler, api_key=None).analyze_code("x")
        assert exc_info.value.kind is ProviderErrorKind.UNAUTHORIZED
        handler.assert_not_called()


class TestGroqProvider:
    @staticmethod
    def make_client(content="analysis text", side_effect=None):
        client = MagicMock()
        completion = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
        )
        client.chat.completions.create = AsyncMock(return_value=completion, side_effect=side_effect)
        client.close = AsyncMock()
        return client

    @pytest.mark.asyncio
    async def test_analyze_code_parameters(self):
        client = self.make_client()
        provider = GroqProvider("gsk_test", client=client)

        assert await provider.analyze_code("x = 1", "python", "performance") == "analysis text"

        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "llama-3.3-70b-versatile"
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 2048
        assert kwargs["top_p"] == 1
        assert "x = 1" in kwargs["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_suggestions_use_higher_temperature(self):
        client = self.make_client()
        provider = GroqProvider("gsk_test", client=client)

        await provider.suggest_improvements("x = 1", "python", "focus on naming")

        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["temperature"] == 0.4
        assert "focus on naming" in kwargs["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_empty_content_placeholder(self):
        provider = GroqProvider("gsk_test", client=self.make_client(content=None))
        assert await provider.explain_code("x") == "No explanation generated"

    @pytest.mark.asyncio
    async def test_rate_limit_error_mapped(self):
        request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
        error = openai.RateLimitError(
            "Rate limit reached", response=httpx.Response(429, request=request), body=None
        )
        client = self.make_client(side_effect=error)
        provider = GroqProvider(
            "gsk_test", client=client, retry_handler=RetryHandler(sleep=RecordingSleep())
        )

        with pytest.raises(ProviderError) as exc_info:
            await provider.analyze_code("x")

        assert exc_info.value.kind is ProviderErrorKind.RATE_LIMITED
        assert client.chat.completions.create.await_count == 3

    @pytest.mark.asyncio
    async def test_auth_error_mapped(self):
        request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
        error = openai.AuthenticationError(
            "Invalid API Key", response=httpx.Response(401, request=request), body=None
        )
        provider = GroqProvider("gsk_test", client=self.make_client(side_effect=error))

        with pytest.raises(ProviderError) as exc_info:
            await provider.analyze_code("x")
        assert exc_info.value.kind is ProviderErrorKind.UNAUTHORIZED
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_connection_errors_mapped(self):
        request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
        for error in (openai.APITimeoutError(request=request), openai.APIConnectionError(request=request)):
            provider = GroqProvider("gsk_test", client=self.make_client(side_effect=error))
            with pytest.raises(ProviderError) as exc_info:
                await provider.analyze_code("x")
            assert exc_info.value.kind is ProviderErrorKind.NETWORK_FAILURE

    @pytest.mark.asyncio
    async def test_report_unsupported(self):
        client = self.make_client()
        provider = GroqProvider("gsk_test", client=client)

        with pytest.raises(ProviderUnsupportedCapability, match="Report generation not supported by Groq"):
            await provider.generate_report([{"analysis": "x"}], {})
        client.chat.completions.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_aclose_closes_client(self):
        client = self.make_client()
        provider = GroqProvider("gsk_test", client=client)
        await provider.aclose()
        client.close.assert_awaited_once()


class TestHuggingFaceProvider:
    @pytest.mark.asyncio
    async def test_generated_text_returned(self):
        captured = {}

        def handler(request):
            captured["auth"] = request.headers["authorization"]
            captured["body"] = json.loads(request.content)
            captured["url"] = str(request.url)
            return httpx.Response(200, json=[{"generated_text": "Looks fine"}])

        result = await make_huggingface(handler).analyze_code("x = 1", "python", "general")

        assert result == "Looks fine"
        assert captured["auth"] == "Bearer hf_test"
        assert captured["url"].endswith("/bigcode/starcoder2-15b")
        assert captured["body"]["parameters"] == {
            "max_length": 1000,
            "temperature": 0.7,
            "return_full_text": False,
        }
        assert "x = 1" in captured["body"]["inputs"]

    @pytest.mark.asyncio
    async def test_missing_generated_text_uses_fallback(self):
        provider = make_huggingface(lambda request: httpx.Response(200, json=[{}]))
        assert await provider.analyze_code("x") == FALLBACK_TEXT

    @pytest.mark.asyncio
    async def test_non_list_body_is_malformed(self):
        provider = make_huggingface(
            lambda request: httpx.Response(200, json={"error": "Model is loading"})
        )
        with pytest.raises(ProviderError) as exc_info:
            await provider.analyze_code("x")
        assert exc_info.value.kind is ProviderErrorKind.MALFORMED_RESPONSE

    @pytest.mark.asyncio
    async def test_error_string_body(self):
        provider = make_huggingface(
            lambda request: httpx.Response(503, json={"error": "Model is currently loading"})
        )
        with pytest.raises(ProviderError) as exc_info:
            await provider.explain_code("x")
        assert exc_info.value.message == "HuggingFace API error: 503 Model is currently loading"
        assert exc_info.value.kind is ProviderErrorKind.UPSTREAM_ERROR

    @pytest.mark.asyncio
    async def test_report_unsupported(self):
        handler = MagicMock()
        with pytest.raises(ProviderUnsupportedCapability):
            await make_huggingface(handler).generate_report([{"analysis": "x"}])
        handler.assert_not_called()
