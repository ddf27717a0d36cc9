"""Engagement metrics data models.

- EngagementMetrics: one cached row per post, derivable from the post's
  comments, reactions, feedback, highlights and engagement log
- UserEngagement: append-only engagement log entry
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from engagement.reactions.models import empty_reaction_counts


class EngagementType(str, Enum):
    """Kinds of user engagement recorded in the log."""

    VIEW = "view"
    COMMENT = "comment"
    REACTION = "reaction"
    RATING = "rating"
    HIGHLIGHT = "highlight"
    SHARE = "share"


# ==============================================================================
# Data Classes
# ==============================================================================


@dataclass(frozen=True)
class UserEngagement:
    """A single engagement log entry. Never mutated or deleted."""

    user_id: str
    post_id: str
    engagement_type: EngagementType
    timestamp: datetime
    duration: float | None = None
    details: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "post_id": self.post_id,
            "engagement_type": self.engagement_type.value,
            "timestamp": self.timestamp.isoformat(),
            "duration": self.duration,
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserEngagement":
        return cls(
            user_id=data["user_id"],
            post_id=data["post_id"],
            engagement_type=EngagementType(data["engagement_type"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            duration=data.get("duration"),
            details=data.get("details"),
        )


@dataclass
class EngagementMetrics:
    """Cached engagement counters for a post."""

    post_id: str
    view_count: int = 0
    unique_view_count: int = 0
    comment_count: int = 0
    reaction_counts: dict[str, int] = field(default_factory=empty_reaction_counts)
    average_rating: float = 0.0
    rating_count: int = 0
    highlight_count: int = 0
    share_count: int = 0
    last_updated: datetime | None = None

    @property
    def total_reactions(self) -> int:
        return sum(self.reaction_counts.values())

    def counters(self) -> dict[str, Any]:
        """Every derived value, without the refresh timestamp."""
        data = self.to_dict()
        data.pop("last_updated")
        return data

    def to_dict(self) -> dict[str, Any]:
        return {
            "post_id": self.post_id,
            "view_count": self.view_count,
            "unique_view_count": self.unique_view_count,
            "comment_count": self.comment_count,
            "reaction_counts": dict(self.reaction_counts),
            "average_rating": self.average_rating,
            "rating_count": self.rating_count,
            "highlight_count": self.highlight_count,
            "share_count": self.share_count,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EngagementMetrics":
        reaction_counts = empty_reaction_counts()
        reaction_counts.update(data.get("reaction_counts", {}))
        return cls(
            post_id=data["post_id"],
            view_count=data.get("view_count", 0),
            unique_view_count=data.get("unique_view_count", 0),
            comment_count=data.get("comment_count", 0),
            reaction_counts=reaction_counts,
            average_rating=data.get("average_rating", 0.0),
            rating_count=data.get("rating_count", 0),
            highlight_count=data.get("highlight_count", 0),
            share_count=data.get("share_count", 0),
            last_updated=(
                datetime.fromisoformat(data["last_updated"])
                if data.get("last_updated")
                else None
            ),
        )


def create_engagement(
    user_id: str,
    post_id: str,
    engagement_type: EngagementType,
    timestamp: datetime,
    details: str | None = None,
    duration: float | None = None,
) -> UserEngagement:
    """Factory for an engagement log entry."""
    return UserEngagement(
        user_id=user_id,
        post_id=post_id,
        engagement_type=engagement_type,
        timestamp=timestamp,
        duration=duration,
        details=details,
    )
