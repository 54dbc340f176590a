"""Per-user contribution counters for one [from, to) window."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError

from app.models.activity import Identity, MemberMetrics, RawCounters, Weights
from app.models.github_graphql import GraphQLUser
from app.services import activity_scoring
from app.services.activity_errors import RemoteQueryError
from app.services.github_graphql_client import GitHubGraphQLClient

USER_CONTRIBUTIONS_QUERY = """
query UserContributions($login: String!, $from: DateTime!, $to: DateTime!) {
  user(login: $login) {
    login
    name
    avatarUrl
    contributionsCollection(from: $from, to: $to) {
      totalCommitContributions
      totalIssueContributions
      totalPullRequestContributions
      totalPullRequestReviewContributions
    }
  }
}
"""


def iso_utc(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _count(value: Optional[int]) -> int:
    return value or 0


def fetch_user_metrics(
    client: GitHubGraphQLClient,
    login: str,
    window_from: datetime,
    window_to: datetime,
    weights: Weights,
) -> MemberMetrics:
    """Fetch profile + contribution totals for ``login`` and score them.

    Raises RemoteQueryError if the user does not resolve, the query fails, or
    the payload does not match the expected shape. No retries.
    """
    data = client.execute(
        USER_CONTRIBUTIONS_QUERY,
        {"login": login, "from": iso_utc(window_from), "to": iso_utc(window_to)},
    )
    raw_user = data.get("user")
    if raw_user is None:
        raise RemoteQueryError(f"Could not resolve user '{login}'")
    try:
        user = GraphQLUser.model_validate(raw_user)
        collection = user.contributions_collection
        totals = RawCounters(
            commits=_count(collection and collection.total_commit_contributions),
            pull_requests=_count(collection and collection.total_pull_request_contributions),
            reviews=_count(collection and collection.total_pull_request_review_contributions),
            issues=_count(collection and collection.total_issue_contributions),
        )
        identity = Identity(login=user.login, name=user.name, avatar_url=user.avatar_url)
    except ValidationError as exc:
        raise RemoteQueryError(f"Unexpected contributions payload for '{login}': {exc.error_count()} errors") from exc

    return MemberMetrics(
        identity=identity,
        totals=totals,
        score=activity_scoring.score(totals, weights),
    )
