"""Pydantic schemas for the reaction API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from engagement.reactions.models import ReactionType


class SetReactionRequest(BaseModel):
    """Request to set the caller's reaction."""

    reaction_type: ReactionType


class ReactionResponse(BaseModel):
    """A single reaction."""

    id: UUID
    target_type: str
    target_id: str
    user_id: str
    user_name: str
    reaction_type: ReactionType
    created_at: datetime

    @classmethod
    def from_reaction(cls, reaction: Any) -> "ReactionResponse":
        target = reaction.target.to_dict()
        return cls(
            id=reaction.reaction_id,
            target_type=target["kind"],
            target_id=target["id"],
            user_id=reaction.user_id,
            user_name=reaction.user_name,
            reaction_type=reaction.type,
            created_at=reaction.created_at,
        )


class RemoveReactionResponse(BaseModel):
    """Outcome of removing a reaction."""

    removed: bool
