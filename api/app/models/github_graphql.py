"""GitHub GraphQL response shapes consumed by the roster and metrics services.

Only the fields the queries select are modelled. Unknown keys are ignored.
"""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from app.models.activity import Identity


class PageInfo(BaseModel):
    has_next_page: bool = Field(
        default=False,
        validation_alias=AliasChoices("has_next_page", "hasNextPage"),
    )
    end_cursor: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("end_cursor", "endCursor"),
    )


class MemberPage(BaseModel):
    """One page of organization.membersWithRole."""

    page_info: PageInfo = Field(validation_alias=AliasChoices("page_info", "pageInfo"))
    nodes: list[Optional[Identity]] = Field(default_factory=list)


class ContributionsCollection(BaseModel):
    """Totals may come back null; callers normalize them to zero."""

    total_commit_contributions: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("total_commit_contributions", "totalCommitContributions"),
    )
    total_pull_request_contributions: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices(
            "total_pull_request_contributions", "totalPullRequestContributions"
        ),
    )
    total_pull_request_review_contributions: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices(
            "total_pull_request_review_contributions", "totalPullRequestReviewContributions"
        ),
    )
    total_issue_contributions: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("total_issue_contributions", "totalIssueContributions"),
    )


class GraphQLUser(BaseModel):
    login: str
    name: Optional[str] = None
    avatar_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("avatar_url", "avatarUrl"),
    )
    contributions_collection: Optional[ContributionsCollection] = Field(
        default=None,
        validation_alias=AliasChoices("contributions_collection", "contributionsCollection"),
    )
