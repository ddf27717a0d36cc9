"""Pydantic schemas for notifications.

Response models for notification operations.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from engagement.notifications.models import CommentNotification, NotificationType


# ==============================================================================
# Response Schemas
# ==============================================================================


class NotificationResponse(BaseModel):
    """Single notification response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Notification ID")
    type: NotificationType = Field(description="Notification type")
    message: str = Field(description="Notification message")
    post_id: str = Field(description="Post the notification is about")
    post_title: str = Field(description="Title of that post")
    comment_id: UUID = Field(description="Comment the notification is about")
    parent_comment_id: UUID | None = Field(None, description="Replied-to comment")
    actor: dict = Field(description="User who triggered the notification")
    is_read: bool = Field(description="Whether notification was read")
    created_at: datetime = Field(description="When notification was created")

    @classmethod
    def from_notification(
        cls, notification: CommentNotification
    ) -> "NotificationResponse":
        """Create response from notification entity."""
        return cls(
            id=notification.notification_id,
            type=notification.type,
            message=notification.message,
            post_id=notification.post_id,
            post_title=notification.post_title,
            comment_id=notification.comment_id,
            parent_comment_id=notification.parent_comment_id,
            actor={"id": notification.actor_id, "name": notification.actor_name},
            is_read=notification.is_read,
            created_at=notification.created_at,
        )


class NotificationListResponse(BaseModel):
    """Paginated notification list response."""

    items: list[NotificationResponse] = Field(description="List of notifications")
    total: int = Field(description="Total notification count")
    unread_count: int = Field(description="Unread notification count")
    has_more: bool = Field(description="Whether more notifications exist")
    next_cursor: str | None = Field(None, description="Cursor for next page")


class UnreadCountResponse(BaseModel):
    """Unread notification count response."""

    count: int = Field(description="Number of unread notifications")


class MarkReadResponse(BaseModel):
    """Response after marking notifications as read."""

    marked_count: int = Field(description="Number of notifications marked as read")
    unread_count: int = Field(description="Remaining unread count")
