"""Pydantic schemas for engagement metrics."""

from datetime import datetime

from pydantic import BaseModel, Field

from engagement.metrics.models import EngagementMetrics


class RecordViewRequest(BaseModel):
    """Optional details of a post view."""

    duration: float | None = Field(None, ge=0, description="Seconds spent reading")


class RecordShareRequest(BaseModel):
    """Where the post was shared."""

    platform: str = Field(..., min_length=1, max_length=50)


class EngagementMetricsResponse(BaseModel):
    """Cached engagement counters for a post."""

    post_id: str
    view_count: int
    unique_view_count: int
    comment_count: int
    reaction_counts: dict[str, int]
    total_reactions: int
    average_rating: float
    rating_count: int
    highlight_count: int
    share_count: int
    last_updated: datetime | None = None

    @classmethod
    def from_metrics(cls, metrics: EngagementMetrics) -> "EngagementMetricsResponse":
        return cls(
            post_id=metrics.post_id,
            view_count=metrics.view_count,
            unique_view_count=metrics.unique_view_count,
            comment_count=metrics.comment_count,
            reaction_counts=dict(metrics.reaction_counts),
            total_reactions=metrics.total_reactions,
            average_rating=metrics.average_rating,
            rating_count=metrics.rating_count,
            highlight_count=metrics.highlight_count,
            share_count=metrics.share_count,
            last_updated=metrics.last_updated,
        )
