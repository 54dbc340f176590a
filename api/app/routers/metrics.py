"""Collaborator activity metrics endpoint."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from app.models.activity import MetricsReport
from app.models.error import ErrorDetail
from app.services import activity_service
from app.services.activity_config import ActivitySettings, settings_from_state
from app.services.activity_errors import ClientInputError, ConfigurationError, RemoteQueryError
from app.services.github_graphql_client import GitHubGraphQLClient

router = APIRouter()


def get_settings(request: Request) -> ActivitySettings:
    return settings_from_state(request.app.state)


def get_graphql_client(settings: ActivitySettings = Depends(get_settings)) -> GitHubGraphQLClient:
    return GitHubGraphQLClient.from_settings(settings)


@router.get(
    "/metrics",
    response_model=MetricsReport,
    responses={
        400: {"model": ErrorDetail},
        500: {"model": ErrorDetail},
        502: {"model": ErrorDetail},
    },
)
def get_metrics(
    from_: Optional[str] = Query(None, alias="from", description="Window start (ISO-8601, inclusive)"),
    to: Optional[str] = Query(None, description="Window end (ISO-8601, exclusive)"),
    org: Optional[str] = Query(None, description="Organization login; defaults to GITHUB_ORG"),
    users: Optional[str] = Query(None, description="Comma-separated logins, used when org yields nobody"),
    settings: ActivitySettings = Depends(get_settings),
    client: GitHubGraphQLClient = Depends(get_graphql_client),
) -> MetricsReport:
    """Score collaborators over [from, to), highest score first."""
    try:
        return activity_service.compute_activity(
            settings,
            client,
            from_raw=from_,
            to_raw=to,
            org=org,
            users=users,
        )
    except ClientInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ConfigurationError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except RemoteQueryError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
