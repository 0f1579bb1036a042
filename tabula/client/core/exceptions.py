"""Custom exception hierarchy."""

from __future__ import annotations


class TabulaError(Exception):
    """Base exception for all library errors."""

    pass


class ApiError(TabulaError):
    """Error reported by the remote database service."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(ApiError):
    """Service rate limit exceeded."""

    def __init__(self, message: str, retry_after: float = 60) -> None:
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class ValidationError(TabulaError):
    """Invalid arguments detected before any request is sent."""

    pass


class PaginationError(ValidationError):
    """Pagination request violates a client-side policy or limit.

    Carries the name of the violated limit (``"size"``, ``"offset"`` or
    ``"cursor"``) and its value when one applies.
    """

    def __init__(
        self,
        message: str,
        limit_name: str,
        limit: int | None = None,
    ) -> None:
        super().__init__(message)
        self.limit_name = limit_name
        self.limit = limit


class ConsistencyError(TabulaError):
    """Local and remote state diverged after a reported-successful write."""

    pass


class ConfigurationError(TabulaError):
    """Client configuration is missing or malformed."""

    pass
