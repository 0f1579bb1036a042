"""Client configuration and shared constants.

This module centralizes the connection settings used by the transport
and repositories so the client facade can stay small and focused.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .exceptions import ConfigurationError

DEFAULT_BRANCH = "main"
DEFAULT_TIMEOUT = 30.0

# Environment variables checked in order when resolving the branch
BRANCH_ENV_VARS = ("TABULA_BRANCH", "VERCEL_GIT_COMMIT_REF", "CF_PAGES_BRANCH", "BRANCH")


@dataclass(frozen=True)
class ClientOptions:
    """Connection settings for a single database branch.

    Attributes:
        database_url: Full database URL, e.g. ``https://acme.example.com/db/shop``
        api_key: Bearer token sent with every request
        branch: Branch name within the database
        timeout: Total request timeout in seconds
    """

    database_url: str
    api_key: str
    branch: str = DEFAULT_BRANCH
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not self.database_url:
            raise ConfigurationError("database_url is required")
        if not self.api_key:
            raise ConfigurationError("api_key is required")
        if "/db/" not in self.database_url:
            raise ConfigurationError(
                f"database_url must look like https://<host>/db/<database>, got {self.database_url!r}"
            )

    @property
    def workspace_url(self) -> str:
        """Base URL all endpoint paths are relative to."""
        return self.database_url.split("/db/", 1)[0]

    @property
    def database(self) -> str:
        """Database name taken from the URL."""
        return self.database_url.split("/db/", 1)[1].strip("/")

    @property
    def db_branch(self) -> str:
        """``<database>:<branch>`` path segment."""
        return f"{self.database}:{self.branch}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientOptions:
        """Build options from environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Raises:
            ConfigurationError: If the database URL or API key is not set
        """
        env = os.environ if environ is None else environ
        database_url = env.get("TABULA_DATABASE_URL", "")
        api_key = env.get("TABULA_API_KEY", "")
        if not database_url:
            raise ConfigurationError("TABULA_DATABASE_URL environment variable is not set")
        if not api_key:
            raise ConfigurationError("TABULA_API_KEY environment variable is not set")

        timeout = env.get("TABULA_TIMEOUT")
        return cls(
            database_url=database_url,
            api_key=api_key,
            branch=resolve_branch(env),
            timeout=float(timeout) if timeout else DEFAULT_TIMEOUT,
        )


def resolve_branch(environ: Mapping[str, str] | None = None) -> str:
    """Resolve the branch name from the environment.

    Examples:
        >>> resolve_branch({"BRANCH": "feature-x"})
        'feature-x'
        >>> resolve_branch({})
        'main'
    """
    env = os.environ if environ is None else environ
    for name in BRANCH_ENV_VARS:
        value = env.get(name)
        if value:
            return value
    return DEFAULT_BRANCH
