"""Pydantic models."""

from app.models.activity import (
    AggregationResult,
    Identity,
    MemberMetrics,
    MemberSummary,
    MemberTotals,
    MetricsReport,
    RawCounters,
    Weights,
)
from app.models.error import ErrorDetail

__all__ = [
    "AggregationResult",
    "ErrorDetail",
    "Identity",
    "MemberMetrics",
    "MemberSummary",
    "MemberTotals",
    "MetricsReport",
    "RawCounters",
    "Weights",
]
