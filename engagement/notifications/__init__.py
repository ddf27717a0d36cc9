"""Notifications about replies, mentions and moderation decisions.

Note: the dispatcher and router are not exported here to avoid circular
imports.
"""

from engagement.notifications.models import (
    CommentNotification,
    NotificationEvent,
    NotificationType,
)


__all__ = [
    "CommentNotification",
    "NotificationEvent",
    "NotificationType",
]
