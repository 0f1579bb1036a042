"""REST transport over aiohttp."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from .http_client import HTTPClient

if TYPE_CHECKING:
    from ...core.config import ClientOptions


@runtime_checkable
class Transport(Protocol):
    """Executes one remote call.

    Errors are raised as ``ApiError`` carrying the HTTP status code.
    """

    async def execute(self, method: str, path: str, body: Any = None) -> Any: ...


class RESTTransport:
    """Transport sending JSON requests to the workspace URL.

    Args:
        base_url: Workspace URL every path is relative to
        api_key: Bearer token for the ``Authorization`` header
        timeout: Total request timeout in seconds
        http: Pre-built HTTP client (mostly for tests)
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str,
        timeout: float = 30.0,
        http: HTTPClient | None = None,
    ) -> None:
        self.base_url = base_url
        self._http = http or HTTPClient(
            base_url=base_url,
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
        )

    @classmethod
    def from_options(cls, options: ClientOptions) -> RESTTransport:
        return cls(options.workspace_url, api_key=options.api_key, timeout=options.timeout)

    async def execute(self, method: str, path: str, body: Any = None) -> Any:
        return await self._http.request(method, path, json=body)

    async def close(self) -> None:
        await self._http.close()
