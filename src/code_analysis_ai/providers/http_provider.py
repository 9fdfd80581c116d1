"""Shared plumbing for providers reached over plain JSON/HTTP with httpx."""

from typing import Any, Dict, Optional, Tuple

import httpx

from .base import BaseProvider, ProviderError, ProviderErrorKind
from .retry_handler import RetryHandler

RATE_LIMIT_STATUSES = {"RESOURCE_EXHAUSTED"}


class HTTPProvider(BaseProvider):
    """Base class for adapters that POST JSON to a REST endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        timeout: float = 30.0,
        retry_handler: Optional[RetryHandler] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(api_key, timeout=timeout, retry_handler=retry_handler)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def _post_json(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        """POST a JSON payload and return the decoded body, classifying failures."""
        try:
            response = await self.client.post(url, json=payload, headers=headers, params=params)
        except httpx.TimeoutException:
            raise self._error(
                f"request timed out after {self.timeout}s", ProviderErrorKind.NETWORK_FAILURE
            )
        except httpx.HTTPError as e:
            raise self._error(f"connection error: {e}", ProviderErrorKind.NETWORK_FAILURE)

        if response.is_error:
            raise self._status_error(response)

        try:
            return response.json()
        except ValueError as e:
            raise self._error(
                f"returned invalid JSON: {e}", ProviderErrorKind.MALFORMED_RESPONSE, response.status_code
            )

    def _status_error(self, response: httpx.Response) -> ProviderError:
        status_code = response.status_code
        upstream_message, upstream_status = _extract_error(response)
        message = f"API error: {status_code} {upstream_message or response.reason_phrase}".rstrip()

        if status_code == 429 or upstream_status in RATE_LIMIT_STATUSES:
            kind = ProviderErrorKind.RATE_LIMITED
        elif status_code in (401, 403):
            kind = ProviderErrorKind.UNAUTHORIZED
        else:
            kind = ProviderErrorKind.UPSTREAM_ERROR
        return self._error(message, kind, status_code, upstream_status=upstream_status)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def _extract_error(response: httpx.Response) -> Tuple[Optional[str], Optional[str]]:
    """Pull ``(message, status)`` out of a JSON error body when there is one."""
    try:
        body = response.json()
    except ValueError:
        return None, None

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("message"), error.get("status")
    if isinstance(error, str):
        return error, None
    return None, None
