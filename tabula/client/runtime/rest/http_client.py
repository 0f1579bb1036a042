"""HTTP client helper."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from ...core.exceptions import ApiError, RateLimitError

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER = 60.0


class HTTPClient:
    """Async HTTP client wrapper.

    Non-2xx responses are raised as ``ApiError`` (``RateLimitError`` for
    429); a 204 response yields None.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.headers = dict(headers or {})
        self._session: aiohttp.ClientSession | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout, headers=self.headers)
        return self._session

    def _url(self, url: str) -> str:
        # Relative paths are joined onto base_url
        if self.base_url and not url.startswith("http"):
            return f"{self.base_url.rstrip('/')}{url}"
        return url

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Send a request and decode its JSON body."""
        async with self.session.request(
            method, self._url(url), json=json, headers=headers
        ) as response:
            if response.status == 204:
                return None
            if response.status >= 400:
                await self._raise_for_status(response)
            return await response.json(content_type=None)

    async def get(self, url: str, headers: dict[str, str] | None = None) -> Any:
        """GET request."""
        return await self.request("GET", url, headers=headers)

    async def post(self, url: str, json: Any = None, headers: dict[str, str] | None = None) -> Any:
        """POST request."""
        return await self.request("POST", url, json=json, headers=headers)

    async def _raise_for_status(self, response: aiohttp.ClientResponse) -> None:
        message: str | None = None
        try:
            body = await response.json(content_type=None)
        except (aiohttp.ContentTypeError, ValueError):
            body = None
        if isinstance(body, dict) and isinstance(body.get("message"), str):
            message = body["message"]
        message = message or response.reason or f"HTTP {response.status}"

        logger.debug(
            "request_failed",
            extra={"status": response.status, "url": str(response.url), "error": message},
        )
        if response.status == 429:
            raise RateLimitError(message, retry_after=_retry_after(response.headers))
        raise ApiError(message, status_code=response.status)

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()


def _retry_after(headers: Any) -> float:
    value = headers.get("Retry-After") if headers is not None else None
    try:
        return float(value) if value is not None else DEFAULT_RETRY_AFTER
    except (TypeError, ValueError):
        return DEFAULT_RETRY_AFTER
