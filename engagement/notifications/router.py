"""Notification API routes.

Endpoints for:
- GET /v1/notifications - List the caller's notifications
- GET /v1/notifications/unread-count - Get unread count
- POST /v1/notifications/{notification_id}/read - Mark one as read
- POST /v1/notifications/read-all - Mark all as read
"""

from uuid import UUID

from fastapi import APIRouter, Query

from engagement.comments.schemas import decode_cursor, encode_cursor, resolve_page_limit
from engagement.config.dependencies import AppSettings
from engagement.core.errors import NotFoundError
from engagement.core.identity import CurrentActor
from engagement.notifications.dependencies import NotificationDispatcherDep
from engagement.notifications.schemas import (
    MarkReadResponse,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)


router = APIRouter(
    prefix="/v1/notifications",
    tags=["notifications"],
)


@router.get(
    "",
    response_model=NotificationListResponse,
    summary="List user notifications",
)
async def list_notifications(
    actor: CurrentActor,
    dispatcher: NotificationDispatcherDep,
    settings: AppSettings,
    limit: int | None = Query(default=None, description="Items per page"),
    cursor: str | None = Query(default=None, description="Pagination cursor"),
    unread_only: bool = Query(default=False, description="Only show unread"),
) -> NotificationListResponse:
    """List notifications for the current user, newest first."""
    limit = resolve_page_limit(
        limit, settings.notification_page_size, settings.notification_page_size_max
    )
    offset = decode_cursor(cursor)
    notifications = await dispatcher.list_notifications(
        actor.user_id, unread_only=unread_only
    )
    page = notifications[offset : offset + limit]
    has_more = offset + len(page) < len(notifications)
    unread = (
        len(notifications)
        if unread_only
        else sum(1 for n in notifications if not n.is_read)
    )
    return NotificationListResponse(
        items=[NotificationResponse.from_notification(n) for n in page],
        total=len(notifications),
        unread_count=unread,
        has_more=has_more,
        next_cursor=encode_cursor(offset + len(page)) if has_more else None,
    )


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Get unread notification count",
)
async def get_unread_count(
    actor: CurrentActor,
    dispatcher: NotificationDispatcherDep,
) -> UnreadCountResponse:
    count = await dispatcher.unread_count(actor.user_id)
    return UnreadCountResponse(count=count)


@router.post(
    "/read-all",
    response_model=MarkReadResponse,
    summary="Mark all notifications as read",
)
async def mark_all_read(
    actor: CurrentActor,
    dispatcher: NotificationDispatcherDep,
) -> MarkReadResponse:
    marked_count = await dispatcher.mark_all_read(actor.user_id)
    unread_count = await dispatcher.unread_count(actor.user_id)
    return MarkReadResponse(marked_count=marked_count, unread_count=unread_count)


@router.post(
    "/{notification_id}/read",
    response_model=MarkReadResponse,
    summary="Mark notification as read",
)
async def mark_notification_read(
    notification_id: UUID,
    actor: CurrentActor,
    dispatcher: NotificationDispatcherDep,
) -> MarkReadResponse:
    """Mark one of the caller's notifications as read."""
    notification = await dispatcher.get_notification(notification_id)
    if notification.user_id != actor.user_id:
        raise NotFoundError(f"Notification {notification_id} not found")

    was_unread = not notification.is_read
    await dispatcher.mark_read(notification_id)
    unread_count = await dispatcher.unread_count(actor.user_id)
    return MarkReadResponse(
        marked_count=1 if was_unread else 0, unread_count=unread_count
    )
