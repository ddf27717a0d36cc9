"""Pydantic schemas for the comment API.

Request/Response models for:
- Comment create, edit and moderation
- Comment listings with cursor pagination
"""

import base64
import binascii
import json
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from engagement.comments.models import CommentSort, ModerationStatus
from engagement.core.errors import ValidationError
from engagement.reactions.models import ReactionType


# ==============================================================================
# Request Schemas
# ==============================================================================


class CreateCommentRequest(BaseModel):
    """Request to create a new comment."""

    content: str
    parent_id: UUID | None = None
    highlight_id: UUID | None = None


class UpdateCommentRequest(BaseModel):
    """Request to edit a comment."""

    content: str


class ModerateCommentRequest(BaseModel):
    """Request to change a comment's moderation status."""

    status: ModerationStatus


# ==============================================================================
# Response Schemas
# ==============================================================================


class AuthorResponse(BaseModel):
    """Author information in comment response."""

    id: str
    name: str
    avatar: str | None = None


class ReactionCountsResponse(BaseModel):
    """Reaction counts for a comment."""

    like: int = 0
    love: int = 0
    haha: int = 0
    wow: int = 0
    sad: int = 0
    angry: int = 0
    total: int = 0

    @classmethod
    def from_counts(cls, counts: dict[str, int]) -> "ReactionCountsResponse":
        return cls(
            **{t.value: counts.get(t.value, 0) for t in ReactionType},
            total=sum(counts.values()),
        )


class CommentResponse(BaseModel):
    """Response for a single comment."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    post_id: str
    parent_id: UUID | None = None
    author: AuthorResponse
    content: str
    moderation_status: ModerationStatus
    is_edited: bool = False
    reply_count: int = 0
    highlight_id: UUID | None = None
    highlight_text: str | None = None
    reactions: ReactionCountsResponse = Field(default_factory=ReactionCountsResponse)
    user_reaction: ReactionType | None = None
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_comment(
        cls, comment: Any, viewer_id: str | None = None
    ) -> "CommentResponse":
        """Create response from Comment entity.

        Args:
            comment: Comment entity
            viewer_id: User whose own reaction should be reported, if any
        """
        own = comment.reactions.get(viewer_id) if viewer_id else None
        return cls(
            id=comment.comment_id,
            post_id=comment.post_id,
            parent_id=comment.parent_id,
            author=AuthorResponse(
                id=comment.author.user_id,
                name=comment.author.display_name,
                avatar=comment.author.avatar_url,
            ),
            content=comment.content,
            moderation_status=comment.moderation_status,
            is_edited=comment.is_edited,
            reply_count=comment.reply_count,
            highlight_id=comment.highlight_id,
            highlight_text=comment.highlight_text,
            reactions=ReactionCountsResponse.from_counts(comment.reaction_counts()),
            user_reaction=own.type if own else None,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )


class CommentListResponse(BaseModel):
    """Paginated list of comments."""

    items: list[CommentResponse]
    total: int
    has_more: bool
    next_cursor: str | None = None


# ==============================================================================
# Cursor Helpers
# ==============================================================================


def encode_cursor(offset: int) -> str:
    """Encode pagination cursor."""
    json_str = json.dumps({"offset": offset})
    return base64.urlsafe_b64encode(json_str.encode()).decode()


def decode_cursor(cursor: str | None) -> int:
    """Decode pagination cursor into an offset (0 when absent)."""
    if not cursor:
        return 0
    try:
        data = json.loads(base64.urlsafe_b64decode(cursor.encode()).decode())
        offset = int(data["offset"])
    except (binascii.Error, ValueError, KeyError, TypeError, UnicodeDecodeError) as e:
        raise ValidationError("Invalid pagination cursor") from e
    if offset < 0:
        raise ValidationError("Invalid pagination cursor")
    return offset


def resolve_page_limit(limit: int | None, default: int, maximum: int) -> int:
    """Page size requested by the caller, or the configured default."""
    if limit is None:
        return default
    if not 1 <= limit <= maximum:
        raise ValidationError(f"limit must be between 1 and {maximum}")
    return limit
