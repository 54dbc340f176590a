"""GitHub GraphQL client.

POST wrapper with:
- mandatory bearer token, checked before any network activity
- no response cache and no retries (each call reflects live state)
- one error type for transport, HTTP status and GraphQL ``errors`` failures
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from app.services.activity_config import DEFAULT_TIMEOUT_S, GITHUB_GRAPHQL_URL, ActivitySettings
from app.services.activity_errors import ConfigurationError, RemoteQueryError

log = logging.getLogger(__name__)


def _first_error_message(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    errors = payload.get("errors")
    if isinstance(errors, list) and errors:
        first = errors[0]
        if isinstance(first, dict) and first.get("message"):
            return str(first["message"])
    # REST-style error bodies (401/403 from the gateway) carry a top-level message.
    message = payload.get("message")
    if isinstance(message, str) and message:
        return message
    return None


class GitHubGraphQLClient:
    def __init__(
        self,
        token: Optional[str],
        url: str = GITHUB_GRAPHQL_URL,
        timeout: float = DEFAULT_TIMEOUT_S,
        user_agent: str = "activity-pulse/1.0",
    ) -> None:
        self._token = (token or "").strip() or None
        self._url = url
        self._timeout = timeout
        self._headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Cache-Control": "no-cache",
            "User-Agent": user_agent,
        }

    @classmethod
    def from_settings(cls, settings: ActivitySettings) -> "GitHubGraphQLClient":
        return cls(settings.github_token, url=settings.graphql_url, timeout=settings.timeout_s)

    def _auth_headers(self) -> dict[str, str]:
        if not self._token:
            raise ConfigurationError("GITHUB_TOKEN is not configured")
        headers = dict(self._headers)
        headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def execute(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """Run one query and return its ``data`` object."""
        headers = self._auth_headers()
        try:
            with httpx.Client(timeout=self._timeout, headers=headers) as client:
                resp = client.post(self._url, json={"query": query, "variables": variables})
        except httpx.HTTPError as exc:
            raise RemoteQueryError(f"GitHub GraphQL transport error: {exc}") from exc

        status = int(resp.status_code)
        try:
            payload = resp.json()
        except ValueError:
            payload = None

        message = _first_error_message(payload)
        if not 200 <= status < 300:
            raise RemoteQueryError(message or f"GitHub GraphQL request failed (status {status})", status)
        if payload is None:
            raise RemoteQueryError(f"GitHub GraphQL response was not JSON (status {status})", status)
        if isinstance(payload, dict) and payload.get("errors"):
            raise RemoteQueryError(message or f"GitHub GraphQL request failed (status {status})", status)

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise RemoteQueryError(f"GitHub GraphQL response missing data (status {status})", status)

        remaining = resp.headers.get("X-RateLimit-Remaining")
        if remaining is not None:
            log.debug("github_graphql_rate_limit remaining=%s", remaining)
        return data
