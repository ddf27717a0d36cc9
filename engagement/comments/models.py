"""Comment entities for the threaded comment tree.

Architecture: adjacency list
- parent_id references the parent comment (None for root comments)
- reply_count on the parent caches the number of direct children
- Reactions on a comment are held by the comment, keyed by user id, so a
  user has at most one reaction per comment
- Author info is denormalized onto the comment
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from engagement.core.identity import Actor
from engagement.reactions.models import Reaction


class ModerationStatus(str, Enum):
    """Comment moderation lifecycle."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SPAM = "spam"


class CommentSort(str, Enum):
    """Orderings offered when listing comments."""

    NEWEST = "newest"
    OLDEST = "oldest"
    POPULAR = "popular"


# ==============================================================================
# Entities
# ==============================================================================


@dataclass
class Comment:
    """A comment on a post, possibly a reply to another comment."""

    comment_id: UUID
    post_id: str
    author: Actor
    content: str
    created_at: datetime
    parent_id: UUID | None = None
    updated_at: datetime | None = None
    moderation_status: ModerationStatus = ModerationStatus.PENDING
    is_edited: bool = False
    highlight_id: UUID | None = None
    highlight_text: str | None = None
    reply_count: int = 0
    reactions: dict[str, Reaction] = field(default_factory=dict)

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None

    @property
    def is_visible(self) -> bool:
        """Only approved comments are shown to readers."""
        return self.moderation_status == ModerationStatus.APPROVED

    @property
    def reaction_total(self) -> int:
        return len(self.reactions)

    def reaction_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for reaction in self.reactions.values():
            counts[reaction.type.value] = counts.get(reaction.type.value, 0) + 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "comment_id": str(self.comment_id),
            "post_id": self.post_id,
            "author": self.author.to_dict(),
            "content": self.content,
            "created_at": self.created_at.isoformat(),
            "parent_id": str(self.parent_id) if self.parent_id else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "moderation_status": self.moderation_status.value,
            "is_edited": self.is_edited,
            "highlight_id": str(self.highlight_id) if self.highlight_id else None,
            "highlight_text": self.highlight_text,
            "reply_count": self.reply_count,
            "reactions": [reaction.to_dict() for reaction in self.reactions.values()],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Comment":
        reactions = [Reaction.from_dict(item) for item in data.get("reactions", [])]
        return cls(
            comment_id=UUID(data["comment_id"]),
            post_id=data["post_id"],
            author=Actor.from_dict(data["author"]),
            content=data["content"],
            created_at=datetime.fromisoformat(data["created_at"]),
            parent_id=UUID(data["parent_id"]) if data.get("parent_id") else None,
            updated_at=(
                datetime.fromisoformat(data["updated_at"])
                if data.get("updated_at")
                else None
            ),
            moderation_status=ModerationStatus(data["moderation_status"]),
            is_edited=data.get("is_edited", False),
            highlight_id=(
                UUID(data["highlight_id"]) if data.get("highlight_id") else None
            ),
            highlight_text=data.get("highlight_text"),
            reply_count=data.get("reply_count", 0),
            reactions={reaction.user_id: reaction for reaction in reactions},
        )


def create_comment(
    post_id: str,
    author: Actor,
    content: str,
    created_at: datetime,
    parent_id: UUID | None = None,
    highlight_id: UUID | None = None,
    highlight_text: str | None = None,
) -> Comment:
    """Factory function to create a new pending comment."""
    return Comment(
        comment_id=uuid4(),
        post_id=post_id,
        author=author,
        content=content,
        created_at=created_at,
        parent_id=parent_id,
        highlight_id=highlight_id,
        highlight_text=highlight_text,
    )
