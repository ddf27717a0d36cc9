"""Reactions on comments and posts.

Note: the service and router are not exported here to avoid circular
imports.
"""

from engagement.reactions.models import (
    CommentTarget,
    PostTarget,
    Reaction,
    ReactionTarget,
    ReactionType,
)


__all__ = [
    "CommentTarget",
    "PostTarget",
    "Reaction",
    "ReactionTarget",
    "ReactionType",
]
