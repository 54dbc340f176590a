"""Activity scoring run: validate input, resolve the roster, aggregate, rank.

Run phases: resolving -> dispatching -> draining -> sorted. A failure while
resolving ends the run; per-identity failures while dispatching are absorbed
by the aggregator.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta, timezone
from functools import partial
from typing import Optional

from app.models.activity import Identity, MemberMetrics, MemberSummary, MetricsReport
from app.services import activity_aggregator, roster_service
from app.services.activity_aggregator import RunPhase, log_phase
from app.services.activity_config import ActivitySettings
from app.services.activity_errors import ClientInputError, RemoteQueryError
from app.services.contribution_metrics_service import fetch_user_metrics, iso_utc
from app.services.github_graphql_client import GitHubGraphQLClient

# GitHub rejects contributionsCollection windows longer than one year.
MAX_WINDOW = timedelta(days=366)

log = logging.getLogger(__name__)


def parse_timestamp(raw: str, name: str) -> datetime:
    value = raw.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        # An offset can push year 1 or year 9999 out of range in UTC.
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError) as exc:
        raise ClientInputError(f"Parameter '{name}' is not a valid ISO-8601 timestamp: {raw!r}") from exc


def parse_window(from_raw: Optional[str], to_raw: Optional[str]) -> tuple[datetime, datetime]:
    """Parse the half-open [from, to) contribution window."""
    if not (from_raw or "").strip() or not (to_raw or "").strip():
        raise ClientInputError("Parameters 'from' and 'to' are required (ISO-8601)")
    window_from = parse_timestamp(from_raw or "", "from")
    window_to = parse_timestamp(to_raw or "", "to")
    if window_from >= window_to:
        raise ClientInputError("Parameter 'from' must be earlier than 'to'")
    if window_to - window_from > MAX_WINDOW:
        raise ClientInputError("Contribution window must not exceed one year")
    return window_from, window_to


def resolve_roster(
    client: GitHubGraphQLClient,
    org: Optional[str],
    users: Optional[str],
) -> tuple[list[Identity], str]:
    """Return (identities, source) where source is 'org' or 'users'.

    The org roster wins when it yields anyone. If resolving the org fails, the
    explicit users list is used when present; otherwise the failure propagates.
    """
    explicit = roster_service.parse_user_list(users)
    org = (org or "").strip()
    identities: list[Identity] = []

    if org:
        try:
            identities = roster_service.list_organization_members(client, org)
        except RemoteQueryError as exc:
            if not explicit:
                raise
            log.warning("activity_roster_fallback org=%s users=%d error=%s", org, len(explicit), exc)
        if identities:
            return identities, "org"

    if explicit:
        return explicit, "users"
    raise ClientInputError("No users resolved. Provide a valid org or a users list.")


def compute_activity(
    settings: ActivitySettings,
    client: GitHubGraphQLClient,
    *,
    from_raw: Optional[str],
    to_raw: Optional[str],
    org: Optional[str] = None,
    users: Optional[str] = None,
) -> MetricsReport:
    # Misconfiguration is reported before any request parameter is looked at.
    settings.require_token()
    window_from, window_to = parse_window(from_raw, to_raw)
    started = time.perf_counter()

    log_phase(RunPhase.RESOLVING, org=org or settings.default_org or "-")
    identities, source = resolve_roster(client, org or settings.default_org, users)

    fetch = partial(_fetch_for_identity, client, window_from, window_to, settings)
    result = activity_aggregator.aggregate(identities, fetch, concurrency=settings.concurrency)

    log.info(
        "activity_run_complete source=%s roster=%d members=%d dropped=%d elapsed_ms=%.2f",
        source,
        len(identities),
        len(result.members),
        len(result.dropped),
        (time.perf_counter() - started) * 1000.0,
    )
    return MetricsReport(
        from_=iso_utc(window_from),
        to=iso_utc(window_to),
        source=source,
        members=[MemberSummary.from_metrics(m) for m in result.members],
        dropped_count=len(result.dropped),
    )


def _fetch_for_identity(
    client: GitHubGraphQLClient,
    window_from: datetime,
    window_to: datetime,
    settings: ActivitySettings,
    identity: Identity,
) -> MemberMetrics:
    return fetch_user_metrics(client, identity.login, window_from, window_to, settings.weights)
