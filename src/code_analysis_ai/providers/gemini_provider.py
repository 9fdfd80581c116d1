"""
Google Gemini provider implementation over the Generative Language REST API.
"""

import logging
from typing import Any, Optional

import httpx

from .base import ALL_CAPABILITIES, Capability, ProviderErrorKind
from .http_provider import HTTPProvider
from .retry_handler import RetryHandler

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash"


class GeminiProvider(HTTPProvider):
    """Gemini provider. The only adapter able to generate aggregate reports."""

    name = "Gemini"
    capabilities = ALL_CAPABILITIES

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        retry_handler: Optional[RetryHandler] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize Gemini provider.

        Args:
            api_key: Gemini API key
            model: Model identifier
            base_url: REST API root
            timeout: Request timeout in seconds
            retry_handler: Backoff policy for rate-limited calls
            transport: Custom httpx transport (tests)
        """
        super().__init__(api_key, timeout=timeout, retry_handler=retry_handler, transport=transport)
        self.model = model
        self.base_url = base_url.rstrip("/")
        if not self.is_available():
            logger.warning("GEMINI_API_KEY is not set. Gemini service will not be available.")

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def _generate(self, prompt: str, capability: Capability) -> str:
        body = await self._post_json(
            self.endpoint,
            {"contents": [{"role": "user", "parts": [{"text": prompt}]}]},
            headers={"x-goog-api-key": self.api_key or ""},
        )
        return self._extract_text(body)

    def _extract_text(self, body: Any) -> str:
        candidates = body.get("candidates") if isinstance(body, dict) else None
        if not candidates:
            block_reason = None
            if isinstance(body, dict):
                block_reason = (body.get("promptFeedback") or {}).get("blockReason")
            reason = f" (blocked: {block_reason})" if block_reason else ""
            raise self._error(
                f"returned no candidates{reason}", ProviderErrorKind.MALFORMED_RESPONSE
            )

        try:
            parts = candidates[0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise self._error(
                f"returned an unexpected response shape: {e!r}", ProviderErrorKind.MALFORMED_RESPONSE
            )

        if not text:
            raise self._error("returned an empty response", ProviderErrorKind.MALFORMED_RESPONSE)
        return text
