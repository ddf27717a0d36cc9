"""Per-post engagement metrics.

This module provides:
- A cached metrics row per post, recomputed inside every mutating transaction
- An append-only engagement log driving view, unique view and share counts

Note: the aggregator and router are imported separately to avoid circular
imports.
"""

from engagement.metrics.compute import compute_metrics
from engagement.metrics.models import (
    EngagementMetrics,
    EngagementType,
    UserEngagement,
)


__all__ = [
    "EngagementMetrics",
    "EngagementType",
    "UserEngagement",
    "compute_metrics",
]
