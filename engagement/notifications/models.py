"""Notification entities.

Notification types:
- REPLY: Someone replied to the user's comment
- MENTION: User was mentioned in a comment
- MODERATION: A moderator approved or rejected the user's comment

A notification is an immutable fan-out record for one recipient about one
event; only ``is_read`` changes after creation.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class NotificationType(str, Enum):
    """Types of notifications."""

    REPLY = "reply"
    MENTION = "mention"
    MODERATION = "moderation"


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass(frozen=True)
class NotificationEvent:
    """Everything needed to notify someone, minus the recipient."""

    type: NotificationType
    post_id: str
    post_title: str
    comment_id: UUID
    actor_id: str
    actor_name: str
    message: str
    parent_comment_id: UUID | None = None


@dataclass
class CommentNotification:
    """Notification delivered to a single user."""

    notification_id: UUID
    user_id: str
    type: NotificationType
    post_id: str
    post_title: str
    comment_id: UUID
    actor_id: str
    actor_name: str
    message: str
    created_at: datetime
    parent_comment_id: UUID | None = None
    is_read: bool = False

    def references(self, comment_ids: set[UUID]) -> bool:
        """Whether this notification is about any of the given comments."""
        return self.comment_id in comment_ids or (
            self.parent_comment_id is not None
            and self.parent_comment_id in comment_ids
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "notification_id": str(self.notification_id),
            "user_id": self.user_id,
            "type": self.type.value,
            "post_id": self.post_id,
            "post_title": self.post_title,
            "comment_id": str(self.comment_id),
            "parent_comment_id": (
                str(self.parent_comment_id) if self.parent_comment_id else None
            ),
            "actor_id": self.actor_id,
            "actor_name": self.actor_name,
            "message": self.message,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CommentNotification":
        return cls(
            notification_id=UUID(data["notification_id"]),
            user_id=data["user_id"],
            type=NotificationType(data["type"]),
            post_id=data["post_id"],
            post_title=data["post_title"],
            comment_id=UUID(data["comment_id"]),
            parent_comment_id=(
                UUID(data["parent_comment_id"])
                if data.get("parent_comment_id")
                else None
            ),
            actor_id=data["actor_id"],
            actor_name=data["actor_name"],
            message=data["message"],
            is_read=data.get("is_read", False),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


# ==============================================================================
# Factory Functions
# ==============================================================================


def create_notification(
    user_id: str,
    event: NotificationEvent,
    created_at: datetime,
) -> CommentNotification:
    """Create a new unread notification for one recipient."""
    return CommentNotification(
        notification_id=uuid4(),
        user_id=user_id,
        type=event.type,
        post_id=event.post_id,
        post_title=event.post_title,
        comment_id=event.comment_id,
        parent_comment_id=event.parent_comment_id,
        actor_id=event.actor_id,
        actor_name=event.actor_name,
        message=event.message,
        created_at=created_at,
    )


def create_reply_event(
    post_id: str,
    post_title: str,
    reply_id: UUID,
    parent_comment_id: UUID,
    replier_id: str,
    replier_name: str,
) -> NotificationEvent:
    """Event for a reply to someone's comment."""
    return NotificationEvent(
        type=NotificationType.REPLY,
        post_id=post_id,
        post_title=post_title,
        comment_id=reply_id,
        parent_comment_id=parent_comment_id,
        actor_id=replier_id,
        actor_name=replier_name,
        message=f"{replier_name} replied to your comment",
    )


def create_moderation_event(
    post_id: str,
    post_title: str,
    comment_id: UUID,
    moderator_id: str,
    moderator_name: str,
    status: str,
) -> NotificationEvent:
    """Event for a moderation decision on someone's comment."""
    return NotificationEvent(
        type=NotificationType.MODERATION,
        post_id=post_id,
        post_title=post_title,
        comment_id=comment_id,
        actor_id=moderator_id,
        actor_name=moderator_name,
        message=f"Your comment was {status}",
    )
