"""
HttpTransport - Memory backend behind a single HTTP endpoint.

Every operation is a POST of the request record as JSON to the same URL
(typically a webhook). Only ``get`` responses are decoded.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .base import ChatTransport

__all__ = ["HttpTransport"]

logger = logging.getLogger(__name__)


class HttpTransport(ChatTransport):
    """
    Transport that talks to an external memory API over HTTP.

    Attributes:
        endpoint: URL receiving every request
        _api_key: Optional bearer credential
        _timeout: Client timeout in seconds (None keeps the httpx default)
        _client: Optional shared client; when None a short-lived client is
            opened per request
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str | None = None,
        *,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not endpoint:
            raise ValueError("endpoint is required")
        self.endpoint = endpoint
        self._api_key = api_key or None
        self._timeout = timeout
        self._client = client

        logger.debug("HttpTransport initialized (endpoint=%s, auth=%s)", endpoint, self._api_key is not None)

    @property
    def name(self) -> str:
        return "http"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def _post(self, client: httpx.AsyncClient, payload: dict[str, Any]) -> httpx.Response:
        return await client.post(self.endpoint, json=payload, headers=self._headers())

    async def _exchange(self, payload: dict[str, Any], *, expect_response: bool) -> dict[str, Any]:
        if self._client is not None:
            response = await self._post(self._client, payload)
        else:
            client_kwargs: dict[str, Any] = {}
            if self._timeout is not None:
                client_kwargs["timeout"] = self._timeout
            async with httpx.AsyncClient(**client_kwargs) as client:
                response = await self._post(client, payload)

        response.raise_for_status()

        if not expect_response or not response.content:
            return {}

        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return data

    def __repr__(self) -> str:
        return f"HttpTransport(endpoint={self.endpoint!r})"
