"""Activity scoring configuration: GitHub credential, default org, score weights.

Built once at process start from the environment and passed explicitly to the
client and the scoring pipeline. Values are read-only for the life of a run.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.activity import Weights
from app.services.activity_errors import ConfigurationError

GITHUB_GRAPHQL_URL = "https://api.github.com/graphql"
DEFAULT_CONCURRENCY = 6
DEFAULT_TIMEOUT_S = 20.0

log = logging.getLogger(__name__)


def _env_str(name: str) -> Optional[str]:
    value = (os.getenv(name) or "").strip()
    return value or None


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        log.warning("invalid_numeric_env name=%s value=%r default=%s", name, raw, default)
        return default


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return max(minimum, int(raw))
    except ValueError:
        log.warning("invalid_numeric_env name=%s value=%r default=%s", name, raw, default)
        return default


def weights_from_env() -> Weights:
    defaults = Weights()
    return Weights(
        commit=_env_float("WEIGHT_COMMITS", defaults.commit),
        pull_request=_env_float("WEIGHT_PRS", defaults.pull_request),
        review=_env_float("WEIGHT_REVIEWS", defaults.review),
        issue=_env_float("WEIGHT_ISSUES", defaults.issue),
    )


class ActivitySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    github_token: Optional[str] = Field(default=None, repr=False)
    default_org: Optional[str] = None
    graphql_url: str = GITHUB_GRAPHQL_URL
    weights: Weights = Field(default_factory=Weights)
    concurrency: int = Field(default=DEFAULT_CONCURRENCY, ge=1)
    timeout_s: float = Field(default=DEFAULT_TIMEOUT_S, gt=0)

    @classmethod
    def from_env(cls) -> "ActivitySettings":
        """Read GITHUB_TOKEN (or GH_TOKEN), GITHUB_ORG, WEIGHT_* and tuning knobs."""
        timeout_s = _env_float("GITHUB_TIMEOUT_S", DEFAULT_TIMEOUT_S)
        if not timeout_s > 0:
            timeout_s = DEFAULT_TIMEOUT_S
        return cls(
            github_token=_env_str("GITHUB_TOKEN") or _env_str("GH_TOKEN"),
            default_org=_env_str("GITHUB_ORG"),
            graphql_url=_env_str("GITHUB_GRAPHQL_URL") or GITHUB_GRAPHQL_URL,
            weights=weights_from_env(),
            concurrency=_env_int("ACTIVITY_CONCURRENCY", DEFAULT_CONCURRENCY),
            timeout_s=timeout_s,
        )

    @property
    def has_token(self) -> bool:
        return bool((self.github_token or "").strip())

    def require_token(self) -> str:
        if not self.has_token:
            raise ConfigurationError("GITHUB_TOKEN is not configured")
        return (self.github_token or "").strip()


def settings_from_state(state: Any) -> ActivitySettings:
    """Settings stored on the app state, read from the environment on first use."""
    settings = getattr(state, "activity_settings", None)
    if settings is None:
        settings = ActivitySettings.from_env()
        state.activity_settings = settings
    return settings
