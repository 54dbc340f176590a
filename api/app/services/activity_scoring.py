"""Weighted activity score.

score = commits*w.commit + pull_requests*w.pull_request + reviews*w.review + issues*w.issue

``score`` stays pure and total; non-finite results are cleaned up by the
consumer via ``sanitize_score`` before sorting or display.
"""

from __future__ import annotations

import math

from app.models.activity import RawCounters, Weights


def score(totals: RawCounters, weights: Weights) -> float:
    return (
        totals.commits * weights.commit
        + totals.pull_requests * weights.pull_request
        + totals.reviews * weights.review
        + totals.issues * weights.issue
    )


def sanitize_score(value: float) -> float:
    """Replace NaN/Infinity with 0.0."""
    return value if math.isfinite(value) else 0.0
