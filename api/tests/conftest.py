"""Pytest configuration and fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

_ENV_KEYS = (
    "GITHUB_TOKEN",
    "GH_TOKEN",
    "GITHUB_ORG",
    "GITHUB_GRAPHQL_URL",
    "GITHUB_TIMEOUT_S",
    "ACTIVITY_CONCURRENCY",
    "WEIGHT_COMMITS",
    "WEIGHT_PRS",
    "WEIGHT_REVIEWS",
    "WEIGHT_ISSUES",
)


@pytest.fixture(autouse=True)
def _isolate_activity_env(monkeypatch: pytest.MonkeyPatch):
    # Each test starts from empty settings regardless of the developer shell,
    # and leaves no FastAPI dependency overrides behind.
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)

    from app.main import app
    from app.services.activity_config import ActivitySettings

    app.state.activity_settings = ActivitySettings()
    yield
    app.dependency_overrides.clear()
    app.state.activity_settings = ActivitySettings()
