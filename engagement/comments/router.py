"""Comment API endpoints.

Provides routes for:
- Creating comments and replies on a post
- Listing approved comments with cursor pagination
- Editing, deleting and moderating comments
"""

from uuid import UUID

from fastapi import APIRouter, Response, status

from engagement.comments.dependencies import CommentServiceDep
from engagement.comments.models import CommentSort
from engagement.comments.schemas import (
    CommentListResponse,
    CommentResponse,
    CreateCommentRequest,
    ModerateCommentRequest,
    UpdateCommentRequest,
    decode_cursor,
    encode_cursor,
    resolve_page_limit,
)
from engagement.config.dependencies import AppSettings
from engagement.core.context import set_post_id
from engagement.core.errors import NotFoundError
from engagement.core.identity import CurrentActor


router = APIRouter(prefix="/v1", tags=["comments"])


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create comment",
)
async def create_comment(
    post_id: str,
    data: CreateCommentRequest,
    comment_service: CommentServiceDep,
    actor: CurrentActor,
) -> CommentResponse:
    """Create a comment (or a reply when parent_id is set). Starts pending."""
    set_post_id(post_id)
    comment = await comment_service.create_comment(
        post_id=post_id,
        content=data.content,
        author=actor,
        parent_id=data.parent_id,
        highlight_id=data.highlight_id,
    )
    return CommentResponse.from_comment(comment, actor.user_id)


@router.get(
    "/posts/{post_id}/comments",
    response_model=CommentListResponse,
    summary="List approved comments",
)
async def list_comments(
    post_id: str,
    comment_service: CommentServiceDep,
    settings: AppSettings,
    parent_id: UUID | None = None,
    sort: CommentSort = CommentSort.NEWEST,
    limit: int | None = None,
    cursor: str | None = None,
) -> CommentListResponse:
    """List approved comments at one thread level."""
    limit = resolve_page_limit(
        limit, settings.comment_page_size, settings.comment_page_size_max
    )
    offset = decode_cursor(cursor)
    listing = await comment_service.list_comments(post_id, parent_id, sort)
    items = listing.page(offset, limit)
    has_more = offset + len(items) < len(listing)
    return CommentListResponse(
        items=[CommentResponse.from_comment(c) for c in items],
        total=len(listing),
        has_more=has_more,
        next_cursor=encode_cursor(offset + len(items)) if has_more else None,
    )


@router.get(
    "/comments/{comment_id}",
    response_model=CommentResponse,
    summary="Get comment",
)
async def get_comment(
    comment_id: UUID,
    comment_service: CommentServiceDep,
) -> CommentResponse:
    """Fetch a single comment regardless of moderation status."""
    comment = await comment_service.get_comment(comment_id)
    if comment is None:
        raise NotFoundError(f"Comment {comment_id} not found")
    return CommentResponse.from_comment(comment)


@router.patch(
    "/comments/{comment_id}",
    response_model=CommentResponse,
    summary="Edit comment",
)
async def update_comment(
    comment_id: UUID,
    data: UpdateCommentRequest,
    comment_service: CommentServiceDep,
    actor: CurrentActor,
) -> CommentResponse:
    comment = await comment_service.update_comment(comment_id, data.content)
    return CommentResponse.from_comment(comment, actor.user_id)


@router.delete(
    "/comments/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete comment",
)
async def delete_comment(
    comment_id: UUID,
    comment_service: CommentServiceDep,
    _actor: CurrentActor,
) -> Response:
    """Delete a comment together with its replies, reactions and notifications."""
    await comment_service.delete_comment(comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/comments/{comment_id}/moderation",
    response_model=CommentResponse,
    summary="Moderate comment",
)
async def moderate_comment(
    comment_id: UUID,
    data: ModerateCommentRequest,
    comment_service: CommentServiceDep,
    actor: CurrentActor,
) -> CommentResponse:
    comment = await comment_service.moderate_comment(comment_id, data.status, actor)
    return CommentResponse.from_comment(comment)
