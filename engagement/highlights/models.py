"""Highlight and content feedback entities."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4


MIN_RATING = 1
MAX_RATING = 5


@dataclass
class Highlight:
    """A span of post text selected by a reader.

    ``comment_id`` points back at the comment created from this highlight,
    if any.
    """

    highlight_id: UUID
    post_id: str
    user_id: str
    user_name: str
    text: str
    start_offset: int
    end_offset: int
    created_at: datetime
    comment_id: UUID | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "highlight_id": str(self.highlight_id),
            "post_id": self.post_id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "text": self.text,
            "start_offset": self.start_offset,
            "end_offset": self.end_offset,
            "created_at": self.created_at.isoformat(),
            "comment_id": str(self.comment_id) if self.comment_id else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Highlight":
        return cls(
            highlight_id=UUID(data["highlight_id"]),
            post_id=data["post_id"],
            user_id=data["user_id"],
            user_name=data["user_name"],
            text=data["text"],
            start_offset=data["start_offset"],
            end_offset=data["end_offset"],
            created_at=datetime.fromisoformat(data["created_at"]),
            comment_id=UUID(data["comment_id"]) if data.get("comment_id") else None,
        )


@dataclass
class ContentFeedback:
    """A user's rating of a post. One per user per post."""

    feedback_id: UUID
    post_id: str
    user_id: str
    user_name: str
    rating: int
    created_at: datetime
    feedback: str | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "feedback_id": str(self.feedback_id),
            "post_id": self.post_id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "rating": self.rating,
            "created_at": self.created_at.isoformat(),
            "feedback": self.feedback,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContentFeedback":
        return cls(
            feedback_id=UUID(data["feedback_id"]),
            post_id=data["post_id"],
            user_id=data["user_id"],
            user_name=data["user_name"],
            rating=data["rating"],
            created_at=datetime.fromisoformat(data["created_at"]),
            feedback=data.get("feedback"),
            updated_at=(
                datetime.fromisoformat(data["updated_at"])
                if data.get("updated_at")
                else None
            ),
        )


def create_highlight(
    post_id: str,
    user_id: str,
    user_name: str,
    text: str,
    start_offset: int,
    end_offset: int,
    created_at: datetime,
) -> Highlight:
    return Highlight(
        highlight_id=uuid4(),
        post_id=post_id,
        user_id=user_id,
        user_name=user_name,
        text=text,
        start_offset=start_offset,
        end_offset=end_offset,
        created_at=created_at,
    )


def create_feedback(
    post_id: str,
    user_id: str,
    user_name: str,
    rating: int,
    created_at: datetime,
    feedback: str | None = None,
) -> ContentFeedback:
    return ContentFeedback(
        feedback_id=uuid4(),
        post_id=post_id,
        user_id=user_id,
        user_name=user_name,
        rating=rating,
        created_at=created_at,
        feedback=feedback,
    )
