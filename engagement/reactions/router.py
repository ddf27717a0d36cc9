"""Reaction API endpoints for comments and posts."""

from uuid import UUID

from fastapi import APIRouter

from engagement.core.context import set_post_id
from engagement.core.errors import NotFoundError
from engagement.core.identity import CurrentActor
from engagement.reactions.dependencies import ReactionServiceDep
from engagement.reactions.models import CommentTarget, PostTarget
from engagement.reactions.schemas import (
    ReactionResponse,
    RemoveReactionResponse,
    SetReactionRequest,
)


router = APIRouter(prefix="/v1", tags=["reactions"])


@router.put(
    "/comments/{comment_id}/reaction",
    response_model=ReactionResponse,
    summary="React to comment",
)
async def set_comment_reaction(
    comment_id: UUID,
    data: SetReactionRequest,
    reaction_service: ReactionServiceDep,
    actor: CurrentActor,
) -> ReactionResponse:
    reaction = await reaction_service.set_reaction(
        CommentTarget(comment_id), actor.user_id, actor.display_name, data.reaction_type
    )
    return ReactionResponse.from_reaction(reaction)


@router.get(
    "/comments/{comment_id}/reaction",
    response_model=ReactionResponse,
    summary="Get own comment reaction",
)
async def get_comment_reaction(
    comment_id: UUID,
    reaction_service: ReactionServiceDep,
    actor: CurrentActor,
) -> ReactionResponse:
    reaction = await reaction_service.get_user_reaction(
        CommentTarget(comment_id), actor.user_id
    )
    if reaction is None:
        raise NotFoundError("No reaction on this comment")
    return ReactionResponse.from_reaction(reaction)


@router.delete(
    "/comments/{comment_id}/reaction",
    response_model=RemoveReactionResponse,
    summary="Remove comment reaction",
)
async def remove_comment_reaction(
    comment_id: UUID,
    reaction_service: ReactionServiceDep,
    actor: CurrentActor,
) -> RemoveReactionResponse:
    removed = await reaction_service.remove_reaction(
        CommentTarget(comment_id), actor.user_id
    )
    return RemoveReactionResponse(removed=removed)


@router.put(
    "/posts/{post_id}/reaction",
    response_model=ReactionResponse,
    summary="React to post",
)
async def set_post_reaction(
    post_id: str,
    data: SetReactionRequest,
    reaction_service: ReactionServiceDep,
    actor: CurrentActor,
) -> ReactionResponse:
    set_post_id(post_id)
    reaction = await reaction_service.set_reaction(
        PostTarget(post_id), actor.user_id, actor.display_name, data.reaction_type
    )
    return ReactionResponse.from_reaction(reaction)


@router.get(
    "/posts/{post_id}/reaction",
    response_model=ReactionResponse,
    summary="Get own post reaction",
)
async def get_post_reaction(
    post_id: str,
    reaction_service: ReactionServiceDep,
    actor: CurrentActor,
) -> ReactionResponse:
    reaction = await reaction_service.get_user_reaction(PostTarget(post_id), actor.user_id)
    if reaction is None:
        raise NotFoundError("No reaction on this post")
    return ReactionResponse.from_reaction(reaction)


@router.delete(
    "/posts/{post_id}/reaction",
    response_model=RemoveReactionResponse,
    summary="Remove post reaction",
)
async def remove_post_reaction(
    post_id: str,
    reaction_service: ReactionServiceDep,
    actor: CurrentActor,
) -> RemoveReactionResponse:
    set_post_id(post_id)
    removed = await reaction_service.remove_reaction(PostTarget(post_id), actor.user_id)
    return RemoveReactionResponse(removed=removed)
