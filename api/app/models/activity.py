"""Collaborator activity models.

Identity and counters are read once from GitHub and never mutated; the
aggregator replaces a MemberMetrics with a sanitized copy instead of editing it.
"""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, NonNegativeInt


class Identity(BaseModel):
    """A collaborator login plus optional display metadata."""

    model_config = ConfigDict(frozen=True)

    login: str = Field(min_length=1)
    name: Optional[str] = None
    avatar_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("avatar_url", "avatarUrl"),
    )


class RawCounters(BaseModel):
    """Contribution totals inside one [from, to) window."""

    model_config = ConfigDict(frozen=True)

    commits: NonNegativeInt = 0
    pull_requests: NonNegativeInt = 0
    reviews: NonNegativeInt = 0
    issues: NonNegativeInt = 0


class Weights(BaseModel):
    """Per-signal multipliers. Negative values are allowed to penalize a signal."""

    model_config = ConfigDict(frozen=True)

    commit: float = 1.0
    pull_request: float = 3.0
    review: float = 2.0
    issue: float = 1.5


class MemberMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    identity: Identity
    totals: RawCounters
    score: float


class AggregationResult(BaseModel):
    """Members sorted by score descending; ``dropped`` lists logins whose fetch failed."""

    members: list[MemberMetrics] = Field(default_factory=list)
    dropped: list[str] = Field(default_factory=list)


class MemberTotals(BaseModel):
    """Counter block of a reported member, keyed the way the dashboard reads it."""

    commits: int = 0
    prs: int = 0
    reviews: int = 0
    issues: int = 0


class MemberSummary(BaseModel):
    """One ranked member as returned by GET /api/metrics."""

    model_config = ConfigDict(populate_by_name=True)

    login: str
    name: Optional[str] = None
    avatar_url: Optional[str] = Field(default=None, alias="avatarUrl")
    totals: MemberTotals = Field(default_factory=MemberTotals)
    score: float = 0.0

    @classmethod
    def from_metrics(cls, metrics: MemberMetrics) -> "MemberSummary":
        t = metrics.totals
        return cls(
            login=metrics.identity.login,
            name=metrics.identity.name,
            avatar_url=metrics.identity.avatar_url,
            totals=MemberTotals(
                commits=t.commits,
                prs=t.pull_requests,
                reviews=t.reviews,
                issues=t.issues,
            ),
            score=metrics.score,
        )


class MetricsReport(BaseModel):
    """GET /api/metrics response."""

    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from", description="Window start, ISO8601 UTC (inclusive)")
    to: str = Field(description="Window end, ISO8601 UTC (exclusive)")
    source: str = Field(description="'org' or 'users': where the roster came from")
    members: list[MemberSummary]
    dropped_count: int = Field(0, description="Identities skipped because their fetch failed")
