"""Highlight and feedback API endpoints."""

from fastapi import APIRouter, status

from engagement.core.context import set_post_id
from engagement.core.identity import CurrentActor
from engagement.highlights.dependencies import HighlightServiceDep
from engagement.highlights.schemas import (
    CreateHighlightRequest,
    FeedbackListResponse,
    FeedbackResponse,
    HighlightListResponse,
    HighlightResponse,
    SubmitFeedbackRequest,
)


router = APIRouter(prefix="/v1/posts/{post_id}", tags=["highlights"])


@router.post(
    "/highlights",
    response_model=HighlightResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Highlight text",
)
async def create_highlight(
    post_id: str,
    data: CreateHighlightRequest,
    highlight_service: HighlightServiceDep,
    actor: CurrentActor,
) -> HighlightResponse:
    set_post_id(post_id)
    highlight = await highlight_service.create_highlight(
        post_id=post_id,
        user_id=actor.user_id,
        user_name=actor.display_name,
        text=data.text,
        start_offset=data.start_offset,
        end_offset=data.end_offset,
    )
    return HighlightResponse.from_highlight(highlight)


@router.get(
    "/highlights",
    response_model=HighlightListResponse,
    summary="List highlights",
)
async def list_highlights(
    post_id: str,
    highlight_service: HighlightServiceDep,
) -> HighlightListResponse:
    highlights = await highlight_service.list_highlights(post_id)
    return HighlightListResponse(
        items=[HighlightResponse.from_highlight(h) for h in highlights],
        total=len(highlights),
    )


@router.put(
    "/feedback",
    response_model=FeedbackResponse,
    summary="Rate post",
)
async def submit_feedback(
    post_id: str,
    data: SubmitFeedbackRequest,
    highlight_service: HighlightServiceDep,
    actor: CurrentActor,
) -> FeedbackResponse:
    """Rate the post from 1 to 5. Rating again replaces the earlier rating."""
    set_post_id(post_id)
    feedback = await highlight_service.submit_feedback(
        post_id=post_id,
        user_id=actor.user_id,
        user_name=actor.display_name,
        rating=data.rating,
        feedback_text=data.feedback,
    )
    return FeedbackResponse.from_feedback(feedback)


@router.get(
    "/feedback",
    response_model=FeedbackListResponse,
    summary="List ratings",
)
async def list_feedback(
    post_id: str,
    highlight_service: HighlightServiceDep,
) -> FeedbackListResponse:
    feedback = await highlight_service.list_feedback(post_id)
    return FeedbackListResponse(
        items=[FeedbackResponse.from_feedback(f) for f in feedback],
        total=len(feedback),
    )
