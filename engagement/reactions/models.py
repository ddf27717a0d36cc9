"""Reaction entities.

A reaction targets exactly one thing: a comment or a post. The target is a
tagged variant (``CommentTarget | PostTarget``) so a record can never point
at both.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar
from uuid import UUID, uuid4


class ReactionType(str, Enum):
    """Available reaction types."""

    LIKE = "like"
    LOVE = "love"
    HAHA = "haha"
    WOW = "wow"
    SAD = "sad"
    ANGRY = "angry"


@dataclass(frozen=True)
class CommentTarget:
    """Reaction attached to a comment."""

    comment_id: UUID
    kind: ClassVar[str] = "comment"

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "id": str(self.comment_id)}


@dataclass(frozen=True)
class PostTarget:
    """Reaction attached to a post."""

    post_id: str
    kind: ClassVar[str] = "post"

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "id": self.post_id}


ReactionTarget = CommentTarget | PostTarget


def target_from_dict(data: dict[str, str]) -> ReactionTarget:
    """Rebuild a reaction target from its serialized form."""
    if data["kind"] == CommentTarget.kind:
        return CommentTarget(comment_id=UUID(data["id"]))
    if data["kind"] == PostTarget.kind:
        return PostTarget(post_id=data["id"])
    msg = f"Unknown reaction target kind: {data['kind']}"
    raise ValueError(msg)


@dataclass
class Reaction:
    """A single user's reaction on a comment or a post."""

    reaction_id: UUID
    target: ReactionTarget
    user_id: str
    user_name: str
    type: ReactionType
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "reaction_id": str(self.reaction_id),
            "target": self.target.to_dict(),
            "user_id": self.user_id,
            "user_name": self.user_name,
            "type": self.type.value,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Reaction":
        return cls(
            reaction_id=UUID(data["reaction_id"]),
            target=target_from_dict(data["target"]),
            user_id=data["user_id"],
            user_name=data["user_name"],
            type=ReactionType(data["type"]),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


def create_reaction(
    target: ReactionTarget,
    user_id: str,
    user_name: str,
    reaction_type: ReactionType,
    created_at: datetime,
) -> Reaction:
    """Create a new reaction record."""
    return Reaction(
        reaction_id=uuid4(),
        target=target,
        user_id=user_id,
        user_name=user_name,
        type=reaction_type,
        created_at=created_at,
    )


def empty_reaction_counts() -> dict[str, int]:
    """Zero count for every reaction type."""
    return {reaction_type.value: 0 for reaction_type in ReactionType}
