"""
Hugging Face Inference API provider implementation.
"""

import logging
from typing import Any, Optional

import httpx

from . import prompts
from .base import Capability, ProviderErrorKind
from .http_provider import HTTPProvider
from .retry_handler import RetryHandler

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api-inference.huggingface.co/models"
DEFAULT_MODEL = "bigcode/starcoder2-15b"
FALLBACK_TEXT = "Unable to analyze code with Hugging Face API"


class HuggingFaceProvider(HTTPProvider):
    """Hugging Face text-generation provider with compact completion-style prompts."""

    name = "HuggingFace"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        retry_handler: Optional[RetryHandler] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(api_key, timeout=timeout, retry_handler=retry_handler, transport=transport)
        self.model = model
        self.base_url = base_url.rstrip("/")
        if not self.is_available():
            logger.warning(
                "HUGGINGFACE_API_KEY is not set. Hugging Face service will not be available."
            )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/{self.model}"

    def build_analysis_prompt(self, code: str, language: str, analysis_type: str) -> str:
        return prompts.COMPACT_ANALYSIS_PROMPT.format(language=language, code=code)

    def build_explanation_prompt(self, code: str, language: str) -> str:
        return prompts.COMPACT_EXPLANATION_PROMPT.format(language=language, code=code)

    def build_improvement_prompt(self, code: str, language: str, context: str) -> str:
        return prompts.COMPACT_IMPROVEMENT_PROMPT.format(
            language=language, code=code, context=context
        )

    async def _generate(self, prompt: str, capability: Capability) -> str:
        body = await self._post_json(
            self.endpoint,
            {
                "inputs": prompt,
                "parameters": {
                    "max_length": 1000,
                    "temperature": 0.7,
                    "return_full_text": False,
                },
            },
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        return self._extract_text(body)

    def _extract_text(self, body: Any) -> str:
        if not isinstance(body, list):
            raise self._error(
                f"returned an unexpected response shape: {type(body).__name__}",
                ProviderErrorKind.MALFORMED_RESPONSE,
            )
        first = body[0] if body else None
        text = first.get("generated_text") if isinstance(first, dict) else None
        return text or FALLBACK_TEXT
