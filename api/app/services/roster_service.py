"""Roster resolution: organization members via cursor pagination, or an explicit login list."""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from app.models.activity import Identity
from app.models.github_graphql import MemberPage
from app.services.activity_errors import RemoteQueryError
from app.services.github_graphql_client import GitHubGraphQLClient

MEMBERS_PAGE_SIZE = 100
MAX_MEMBER_PAGES = 10  # ceiling of 1000 members per resolution

MEMBERS_QUERY = """
query OrganizationMembers($org: String!, $first: Int!, $after: String) {
  organization(login: $org) {
    membersWithRole(first: $first, after: $after) {
      pageInfo { hasNextPage endCursor }
      nodes { login name avatarUrl }
    }
  }
}
"""

log = logging.getLogger(__name__)


def _member_page(data: dict, org: str) -> Optional[MemberPage]:
    organization = data.get("organization")
    if organization is None:
        return None
    if not isinstance(organization, dict):
        raise RemoteQueryError(f"Unexpected organization payload for '{org}'")
    raw_page = organization.get("membersWithRole")
    if raw_page is None:
        return None
    try:
        return MemberPage.model_validate(raw_page)
    except ValidationError as exc:
        raise RemoteQueryError(f"Unexpected membersWithRole payload for '{org}': {exc.error_count()} errors") from exc


def list_organization_members(
    client: GitHubGraphQLClient,
    org: str,
    page_size: int = MEMBERS_PAGE_SIZE,
    max_pages: int = MAX_MEMBER_PAGES,
) -> list[Identity]:
    """List members of ``org`` in API page order, deduplicated by login.

    Stops when GitHub reports no further page, or after ``max_pages`` requests
    whatever GitHub says (the partial roster is returned). Query failures
    propagate as RemoteQueryError; fallback is the caller's decision.
    """
    members: list[Identity] = []
    seen: set[str] = set()
    after: Optional[str] = None
    for page_number in range(1, max_pages + 1):
        data = client.execute(MEMBERS_QUERY, {"org": org, "first": page_size, "after": after})
        page = _member_page(data, org)
        if page is None:
            break
        for node in page.nodes:
            if node is None or node.login in seen:
                continue
            seen.add(node.login)
            members.append(node)
        log.debug("roster_page org=%s page=%d collected=%d", org, page_number, len(members))
        if not page.page_info.has_next_page or not page.page_info.end_cursor:
            break
        after = page.page_info.end_cursor
    else:
        log.info("roster_page_ceiling_reached org=%s pages=%d members=%d", org, max_pages, len(members))
    return members


def parse_user_list(raw: Optional[str]) -> list[Identity]:
    """Split a comma-separated login list; blanks dropped, duplicates removed, order kept."""
    logins = [part.strip() for part in (raw or "").split(",")]
    return [Identity(login=login) for login in dict.fromkeys(login for login in logins if login)]
