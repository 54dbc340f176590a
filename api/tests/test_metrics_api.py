"""Tests for GET /api/metrics.

Contract:
- 200: {from, to, source, members, dropped_count}; members sorted by score descending,
  each {login, name, avatarUrl, totals{commits, prs, reviews, issues}, score}.
- 400: missing/invalid window or no identities resolved.
- 500: GitHub credential not configured (checked before any parameter).
- 502: roster resolution failed upstream with no users fallback.
Errors carry a single top-level "detail" string.
"""

from __future__ import annotations

import json

import pytest
import respx
from httpx import ASGITransport, AsyncClient, Response

from app.main import app
from app.routers.metrics import get_graphql_client
from app.services.activity_config import ActivitySettings
from app.services.activity_errors import RemoteQueryError
from tests.fakes import FakeGraphQLClient, member_page, user_payload

GRAPHQL_URL = "https://api.github.com/graphql"
WINDOW = "from=2024-01-01T00:00:00Z&to=2024-01-08T00:00:00Z"


@pytest.fixture
async def client():
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def _configure(fake: FakeGraphQLClient | None = None, **settings) -> None:
    values = {"github_token": "test-token"}
    values.update(settings)
    app.state.activity_settings = ActivitySettings(**values)
    if fake is not None:
        app.dependency_overrides[get_graphql_client] = lambda: fake


@pytest.mark.asyncio
@respx.mock
async def test_metrics_explicit_users_against_mocked_github(client: AsyncClient):
    users = {
        "alice": user_payload("alice", commits=10, prs=2, reviews=1, issues=0),
        "bob": user_payload("bob", commits=0, prs=0, reviews=0, issues=5),
    }

    def answer(request):
        body = json.loads(request.content)
        return Response(200, json={"data": users[body["variables"]["login"]]})

    route = respx.post(GRAPHQL_URL).mock(side_effect=answer)
    _configure()

    response = await client.get(f"/api/metrics?{WINDOW}&users=alice,bob")

    assert response.status_code == 200
    body = response.json()
    assert body["from"] == "2024-01-01T00:00:00Z"
    assert body["to"] == "2024-01-08T00:00:00Z"
    assert body["source"] == "users"
    assert body["dropped_count"] == 0
    assert [(m["login"], m["score"]) for m in body["members"]] == [("alice", 18.0), ("bob", 7.5)]
    assert body["members"][0] == {
        "login": "alice",
        "name": "Alice",
        "avatarUrl": "https://avatars.example/alice",
        "totals": {"commits": 10, "prs": 2, "reviews": 1, "issues": 0},
        "score": 18.0,
    }
    assert len(route.calls) == 2
    assert all(call.request.headers["authorization"] == "Bearer test-token" for call in route.calls)


@pytest.mark.asyncio
async def test_metrics_org_roster(client: AsyncClient):
    fake = FakeGraphQLClient(
        pages=[member_page(["alice", "bob"], has_next=True, cursor="c1"), member_page(["carol"])],
        users={
            "alice": user_payload("alice", commits=1),
            "bob": user_payload("bob", prs=3),
            "carol": user_payload("carol", reviews=2),
        },
    )
    _configure(fake)

    response = await client.get(f"/api/metrics?{WINDOW}&org=acme")

    assert response.status_code == 200
    body = response.json()
    assert body["source"] == "org"
    assert [m["login"] for m in body["members"]] == ["bob", "carol", "alice"]
    assert [m["score"] for m in body["members"]] == [9.0, 4.0, 1.0]


@pytest.mark.asyncio
async def test_metrics_partial_failure_hidden_from_members(client: AsyncClient):
    fake = FakeGraphQLClient(
        users={
            "alice": user_payload("alice", commits=3),
            "bob": RemoteQueryError("timeout"),
            "carol": user_payload("carol", issues=4),
        }
    )
    _configure(fake)

    response = await client.get(f"/api/metrics?{WINDOW}&users=alice,bob,carol")

    assert response.status_code == 200
    body = response.json()
    assert [m["login"] for m in body["members"]] == ["carol", "alice"]
    assert body["dropped_count"] == 1
    assert "timeout" not in response.text


@pytest.mark.asyncio
async def test_metrics_missing_window_is_400(client: AsyncClient):
    fake = FakeGraphQLClient()
    _configure(fake)

    response = await client.get("/api/metrics?users=alice")

    assert response.status_code == 400
    assert list(response.json().keys()) == ["detail"]
    assert "from" in response.json()["detail"]
    assert fake.calls == []


@pytest.mark.asyncio
async def test_metrics_invalid_timestamp_is_400(client: AsyncClient):
    _configure(FakeGraphQLClient())

    response = await client.get("/api/metrics?from=yesterday&to=2024-01-08T00:00:00Z&users=alice")

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_metrics_timestamp_outside_utc_range_is_400(client: AsyncClient):
    fake = FakeGraphQLClient()
    _configure(fake)

    response = await client.get(
        "/api/metrics",
        params={"from": "0001-01-01T00:00:00+05:00", "to": "2024-01-08T00:00:00Z", "users": "alice"},
    )

    assert response.status_code == 400
    assert "'from'" in response.json()["detail"]
    assert fake.calls == []


@pytest.mark.asyncio
async def test_metrics_org_with_no_members_and_no_users_is_400(client: AsyncClient):
    fake = FakeGraphQLClient(pages=[member_page([])])
    _configure(fake)

    response = await client.get(f"/api/metrics?{WINDOW}&org=acme")

    assert response.status_code == 400
    assert response.json()["detail"] == "No users resolved. Provide a valid org or a users list."
    assert len(fake.calls) == 1


@pytest.mark.asyncio
async def test_metrics_without_identities_is_400(client: AsyncClient):
    _configure(FakeGraphQLClient())

    response = await client.get(f"/api/metrics?{WINDOW}")

    assert response.status_code == 400


@pytest.mark.asyncio
@respx.mock(assert_all_called=False)
async def test_metrics_missing_credential_is_500_before_anything_else(client: AsyncClient):
    route = respx.post(GRAPHQL_URL).mock(return_value=Response(200, json={"data": {}}))
    app.state.activity_settings = ActivitySettings()

    response = await client.get("/api/metrics?from=not-a-date&users=alice")

    assert response.status_code == 500
    assert response.json() == {"detail": "GITHUB_TOKEN is not configured"}
    assert not route.called


@pytest.mark.asyncio
async def test_metrics_org_failure_without_users_is_502(client: AsyncClient):
    _configure(FakeGraphQLClient(roster_error=RemoteQueryError("Could not resolve to an Organization")))

    response = await client.get(f"/api/metrics?{WINDOW}&org=nope")

    assert response.status_code == 502
    assert response.json() == {"detail": "Could not resolve to an Organization"}


@pytest.mark.asyncio
async def test_metrics_org_failure_with_users_falls_back(client: AsyncClient):
    fake = FakeGraphQLClient(
        roster_error=RemoteQueryError("Could not resolve to an Organization"),
        users={"alice": user_payload("alice", commits=2)},
    )
    _configure(fake)

    response = await client.get(f"/api/metrics?{WINDOW}&org=nope&users=alice")

    assert response.status_code == 200
    assert response.json()["source"] == "users"
    assert response.json()["members"][0]["score"] == 2.0
