#!/usr/bin/env python3
"""Score collaborator activity for an org or a login list over a date window.

Usage:
  python scripts/score_activity.py --from 2024-01-01T00:00:00Z --to 2024-01-08T00:00:00Z [--org ORG] [--users a,b] [--json] [-v]

Notes:
- Reads GITHUB_TOKEN, GITHUB_ORG and WEIGHT_* from the environment (or api/.env)
- Exit code 2 for bad input / nobody resolved, 1 for configuration or GitHub failures
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys

from dotenv import load_dotenv

_api_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _api_dir)
load_dotenv(os.path.join(_api_dir, ".env"))

from app.models.activity import MetricsReport
from app.services.activity_config import ActivitySettings
from app.services.activity_errors import ClientInputError, ConfigurationError, RemoteQueryError
from app.services.activity_service import compute_activity
from app.services.github_graphql_client import GitHubGraphQLClient

log = logging.getLogger(__name__)


def _format_table(report: MetricsReport) -> str:
    lines = [
        f"Activity {report.from_} -> {report.to} (source={report.source}, dropped={report.dropped_count})",
        f"{'#':>3}  {'login':<24} {'commits':>8} {'prs':>5} {'reviews':>8} {'issues':>7} {'score':>9}",
    ]
    for rank, member in enumerate(report.members, start=1):
        t = member.totals
        lines.append(
            f"{rank:>3}  {member.login:<24} {t.commits:>8} {t.prs:>5} "
            f"{t.reviews:>8} {t.issues:>7} {member.score:>9.2f}"
        )
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Score GitHub collaborator activity over [from, to).")
    ap.add_argument("--from", dest="from_", required=True, help="Window start, ISO-8601 (inclusive)")
    ap.add_argument("--to", required=True, help="Window end, ISO-8601 (exclusive)")
    ap.add_argument("--org", default=None, help="Organization login (default: GITHUB_ORG)")
    ap.add_argument("--users", default=None, help="Comma-separated logins (fallback when org yields nobody)")
    ap.add_argument("--json", action="store_true", help="Print the report as JSON")
    ap.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    settings = ActivitySettings.from_env()
    client = GitHubGraphQLClient.from_settings(settings)
    try:
        report = compute_activity(
            settings,
            client,
            from_raw=args.from_,
            to_raw=args.to,
            org=args.org,
            users=args.users,
        )
    except ClientInputError as e:
        log.error("%s", e)
        return 2
    except (ConfigurationError, RemoteQueryError) as e:
        log.error("%s", e)
        return 1

    if args.json:
        print(json.dumps(report.model_dump(mode="json", by_alias=True), indent=2))
    else:
        print(_format_table(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
