"""Notification service layer.

Business logic for:
- Appending notifications (inside another manager's transaction or standalone)
- Listing a user's notifications, newest first
- Marking notifications as read
- Unread counts

Notifications are stored with the post they are about, so a comment cascade
can drop them in the same transaction. Per-user reads go through the
store's recipient index.
"""

from uuid import UUID

from engagement.core.clock import Clock, utc_now
from engagement.core.errors import NotFoundError, ValidationError
from engagement.core.logging import get_logger
from engagement.notifications.models import (
    CommentNotification,
    NotificationEvent,
    NotificationType,
    create_notification,
)
from engagement.store.base import EngagementStore, PostAggregate


logger = get_logger(__name__)

_REQUIRED_EVENT_FIELDS = (
    "post_id",
    "post_title",
    "comment_id",
    "actor_id",
    "actor_name",
    "message",
)


def validate_event(recipient_user_id: str, event: NotificationEvent) -> None:
    """Raise ValidationError if the recipient or any required field is missing."""
    missing = [name for name in _REQUIRED_EVENT_FIELDS if not getattr(event, name, None)]
    if not recipient_user_id:
        missing.insert(0, "recipient_user_id")
    if missing:
        raise ValidationError(f"Notification is missing required fields: {', '.join(missing)}")
    if not isinstance(event.type, NotificationType):
        raise ValidationError(f"Unknown notification type: {event.type}")


class NotificationDispatcher:
    """Creates and reads comment notifications."""

    def __init__(self, store: EngagementStore, clock: Clock = utc_now):
        self.store = store
        self.clock = clock

    def append(
        self,
        aggregate: PostAggregate,
        recipient_user_id: str,
        event: NotificationEvent,
    ) -> CommentNotification:
        """Add a notification to a post aggregate inside a running transaction."""
        validate_event(recipient_user_id, event)
        if event.post_id != aggregate.post_id:
            raise ValidationError(
                f"Notification for post {event.post_id} appended to post {aggregate.post_id}"
            )

        notification = create_notification(recipient_user_id, event, self.clock())
        aggregate.notifications[notification.notification_id] = notification

        logger.info(
            "notification_created",
            notification_id=str(notification.notification_id),
            recipient_id=recipient_user_id,
            notification_type=event.type.value,
            comment_id=str(event.comment_id),
        )
        return notification

    async def notify(
        self, recipient_user_id: str, event: NotificationEvent
    ) -> CommentNotification:
        """Append a notification as its own transaction."""
        validate_event(recipient_user_id, event)
        return await self.store.execute(
            event.post_id,
            lambda aggregate: self.append(aggregate, recipient_user_id, event),
        )

    async def list_notifications(
        self, user_id: str, unread_only: bool = False
    ) -> list[CommentNotification]:
        """All of a user's notifications, newest first."""
        notifications: list[CommentNotification] = []
        for post_id in await self.store.posts_for_recipient(user_id):
            aggregate = await self.store.snapshot(post_id)
            notifications.extend(
                n
                for n in aggregate.notifications.values()
                if n.user_id == user_id and not (unread_only and n.is_read)
            )
        notifications.sort(key=lambda n: (n.created_at, str(n.notification_id)), reverse=True)
        return notifications

    async def get_notification(self, notification_id: UUID) -> CommentNotification:
        post_id = await self.store.post_for_notification(notification_id)
        if post_id is None:
            raise NotFoundError(f"Notification {notification_id} not found")
        aggregate = await self.store.snapshot(post_id)
        notification = aggregate.notifications.get(notification_id)
        if notification is None:
            raise NotFoundError(f"Notification {notification_id} not found")
        return notification

    async def mark_read(self, notification_id: UUID) -> bool:
        """Mark one notification read.

        Returns False if the notification does not exist. Marking an already
        read notification is a no-op that still returns True.
        """
        post_id = await self.store.post_for_notification(notification_id)
        if post_id is None:
            return False

        def operation(aggregate: PostAggregate) -> bool:
            notification = aggregate.notifications.get(notification_id)
            if notification is None:
                return False
            notification.is_read = True
            return True

        return await self.store.execute(post_id, operation)

    async def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification of a user read. Returns how many changed."""

        def operation(aggregate: PostAggregate) -> int:
            changed = 0
            for notification in aggregate.notifications.values():
                if notification.user_id == user_id and not notification.is_read:
                    notification.is_read = True
                    changed += 1
            return changed

        total = 0
        for post_id in sorted(await self.store.posts_for_recipient(user_id)):
            total += await self.store.execute(post_id, operation)

        if total:
            logger.info("notifications_marked_read", user_id=user_id, count=total)
        return total

    async def unread_count(self, user_id: str) -> int:
        return len(await self.list_notifications(user_id, unread_only=True))
