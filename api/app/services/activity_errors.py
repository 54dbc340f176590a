"""Error taxonomy for activity scoring runs.

Routers map these to HTTP statuses: ClientInputError -> 400,
ConfigurationError -> 500, RemoteQueryError -> 502.
"""

from __future__ import annotations

from typing import Optional


class ActivityError(RuntimeError):
    pass


class ConfigurationError(ActivityError):
    """Required process configuration (the GitHub credential) is missing."""


class ClientInputError(ActivityError):
    """Request parameters are missing/invalid, or no identities were resolved."""


class RemoteQueryError(ActivityError):
    """Any failure talking to the GitHub GraphQL API."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
