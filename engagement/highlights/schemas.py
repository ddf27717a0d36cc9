"""Pydantic schemas for highlights and feedback."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class CreateHighlightRequest(BaseModel):
    """Request to highlight a span of the post."""

    text: str
    start_offset: int
    end_offset: int


class SubmitFeedbackRequest(BaseModel):
    """Request to rate a post."""

    rating: int
    feedback: str | None = Field(None, max_length=2000)


class HighlightResponse(BaseModel):
    id: UUID
    post_id: str
    user_id: str
    user_name: str
    text: str
    start_offset: int
    end_offset: int
    comment_id: UUID | None = None
    created_at: datetime

    @classmethod
    def from_highlight(cls, highlight: Any) -> "HighlightResponse":
        return cls(
            id=highlight.highlight_id,
            post_id=highlight.post_id,
            user_id=highlight.user_id,
            user_name=highlight.user_name,
            text=highlight.text,
            start_offset=highlight.start_offset,
            end_offset=highlight.end_offset,
            comment_id=highlight.comment_id,
            created_at=highlight.created_at,
        )


class HighlightListResponse(BaseModel):
    items: list[HighlightResponse]
    total: int


class FeedbackResponse(BaseModel):
    id: UUID
    post_id: str
    user_id: str
    user_name: str
    rating: int
    feedback: str | None = None
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_feedback(cls, feedback: Any) -> "FeedbackResponse":
        return cls(
            id=feedback.feedback_id,
            post_id=feedback.post_id,
            user_id=feedback.user_id,
            user_name=feedback.user_name,
            rating=feedback.rating,
            feedback=feedback.feedback,
            created_at=feedback.created_at,
            updated_at=feedback.updated_at,
        )


class FeedbackListResponse(BaseModel):
    items: list[FeedbackResponse]
    total: int
