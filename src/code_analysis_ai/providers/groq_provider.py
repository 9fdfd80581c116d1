"""
Groq provider implementation over Groq's OpenAI-compatible chat completions API.
"""

import logging
from typing import Optional

from openai import (
    APIConnectionError,
    APIError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    PermissionDeniedError,
)
from openai import AuthenticationError as OpenAIAuthError
from openai import RateLimitError as OpenAIRateLimitError

from .base import BaseProvider, Capability, ProviderErrorKind
from .retry_handler import RetryHandler

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL = "llama-3.3-70b-versatile"

# Lower temperature for more consistent analysis
TEMPERATURES = {
    Capability.ANALYZE: 0.3,
    Capability.EXPLAIN: 0.3,
    Capability.SUGGEST: 0.4,
}

EMPTY_RESPONSE_TEXT = {
    Capability.ANALYZE: "No analysis generated",
    Capability.EXPLAIN: "No explanation generated",
    Capability.SUGGEST: "No suggestions generated",
}


class GroqProvider(BaseProvider):
    """Groq provider (Llama models) reached through the openai SDK."""

    name = "Groq"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        max_tokens: int = 2048,
        retry_handler: Optional[RetryHandler] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        """
        Initialize Groq provider.

        Args:
            api_key: Groq API key
            model: Model identifier
            base_url: OpenAI-compatible endpoint
            timeout: Request timeout in seconds
            max_tokens: Completion token limit
            retry_handler: Backoff policy for rate-limited calls
            client: Pre-built client (tests)
        """
        super().__init__(api_key, timeout=timeout, retry_handler=retry_handler)
        self.model = model
        self.base_url = base_url
        self.max_tokens = max_tokens
        self._client = client
        if not self.is_available():
            logger.warning("GROQ_API_KEY is not set. Groq service will not be available.")

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,  # We handle retries ourselves
            )
        return self._client

    async def _generate(self, prompt: str, capability: Capability) -> str:
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=TEMPERATURES.get(capability, 0.3),
                max_tokens=self.max_tokens,
                top_p=1,
                stream=False,
            )
        except OpenAIRateLimitError as e:
            raise self._error(f"rate limit exceeded: {e}", ProviderErrorKind.RATE_LIMITED, 429)
        except (OpenAIAuthError, PermissionDeniedError) as e:
            raise self._error(
                f"authentication failed: {e}", ProviderErrorKind.UNAUTHORIZED, e.status_code
            )
        except APITimeoutError:
            raise self._error(
                f"request timed out after {self.timeout}s", ProviderErrorKind.NETWORK_FAILURE
            )
        except APIConnectionError as e:
            raise self._error(f"connection error: {e}", ProviderErrorKind.NETWORK_FAILURE)
        except APIStatusError as e:
            raise self._error(f"API error: {e}", ProviderErrorKind.UPSTREAM_ERROR, e.status_code)
        except APIError as e:
            raise self._error(f"API error: {e}", ProviderErrorKind.MALFORMED_RESPONSE)

        try:
            content = completion.choices[0].message.content if completion.choices else None
        except (AttributeError, IndexError, TypeError) as e:
            raise self._error(f"returned an unexpected response: {e}", ProviderErrorKind.MALFORMED_RESPONSE)
        return content or EMPTY_RESPONSE_TEXT.get(capability, "No analysis generated")

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
