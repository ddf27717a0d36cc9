"""Reaction service layer.

A user holds at most one reaction per target. Setting a reaction creates
it, changes its type in place, or does nothing when the type is unchanged.
Post-level reactions feed the post's metrics; comment reactions do not.
"""

from dataclasses import dataclass

from engagement.core.clock import Clock, utc_now
from engagement.core.errors import NotFoundError, ValidationError
from engagement.core.logging import get_logger
from engagement.metrics.aggregator import MetricsAggregator
from engagement.metrics.models import EngagementType, create_engagement
from engagement.reactions.models import (
    CommentTarget,
    PostTarget,
    Reaction,
    ReactionTarget,
    ReactionType,
    create_reaction,
)
from engagement.store.base import EngagementStore, PostAggregate


logger = get_logger(__name__)


@dataclass(frozen=True)
class ReactionOutcome:
    reaction: Reaction
    outcome: str  # created | updated | unchanged


def reactions_for(aggregate: PostAggregate, target: ReactionTarget) -> dict[str, Reaction]:
    """Reactions on ``target`` keyed by user id.

    Raises:
        NotFoundError: If the target comment is not part of the aggregate
    """
    if isinstance(target, PostTarget):
        return aggregate.post_reactions
    comment = aggregate.comments.get(target.comment_id)
    if comment is None:
        raise NotFoundError(f"Comment {target.comment_id} not found")
    return comment.reactions


class ReactionService:
    """Service for comment and post reactions."""

    def __init__(
        self,
        store: EngagementStore,
        aggregator: MetricsAggregator,
        clock: Clock = utc_now,
    ):
        self.store = store
        self.aggregator = aggregator
        self.clock = clock

    async def _post_for(self, target: ReactionTarget) -> str | None:
        if isinstance(target, PostTarget):
            return target.post_id
        return await self.store.post_for_comment(target.comment_id)

    async def set_reaction(
        self,
        target: ReactionTarget,
        user_id: str,
        user_name: str,
        reaction_type: ReactionType | str,
    ) -> Reaction:
        """Create or change the user's reaction on a target.

        Raises:
            ValidationError: Unknown reaction type
            NotFoundError: Target comment does not exist
        """
        try:
            new_type = ReactionType(reaction_type)
        except ValueError as e:
            raise ValidationError(f"Unknown reaction type: {reaction_type}") from e
        if not user_id:
            raise ValidationError("Reaction requires a user id")

        post_id = await self._post_for(target)
        if post_id is None:
            raise NotFoundError(f"Comment {target.comment_id} not found")
        now = self.clock()

        def operation(aggregate: PostAggregate) -> ReactionOutcome:
            bucket = reactions_for(aggregate, target)
            existing = bucket.get(user_id)

            if existing is not None and existing.type == new_type:
                return ReactionOutcome(existing, "unchanged")

            if existing is not None:
                existing.type = new_type
                existing.user_name = user_name
                result = ReactionOutcome(existing, "updated")
            else:
                reaction = create_reaction(target, user_id, user_name, new_type, now)
                bucket[user_id] = reaction
                result = ReactionOutcome(reaction, "created")

            aggregate.engagement_log.append(
                create_engagement(
                    user_id, post_id, EngagementType.REACTION, now, details=new_type.value
                )
            )
            if isinstance(target, PostTarget):
                self.aggregator.refresh_aggregate(aggregate)
            return result

        result = await self.store.execute(post_id, operation)
        logger.info(
            "reaction_set",
            post_id=post_id,
            target=target.kind,
            user_id=user_id,
            reaction_type=new_type.value,
            outcome=result.outcome,
        )
        return result.reaction

    async def remove_reaction(self, target: ReactionTarget, user_id: str) -> bool:
        """Remove the user's reaction. False when there was none."""
        post_id = await self._post_for(target)
        if post_id is None:
            return False

        def operation(aggregate: PostAggregate) -> bool:
            if isinstance(target, CommentTarget) and target.comment_id not in aggregate.comments:
                return False
            bucket = reactions_for(aggregate, target)
            if bucket.pop(user_id, None) is None:
                return False
            if isinstance(target, PostTarget):
                self.aggregator.refresh_aggregate(aggregate)
            return True

        removed = await self.store.execute(post_id, operation)
        if removed:
            logger.info(
                "reaction_removed", post_id=post_id, target=target.kind, user_id=user_id
            )
        return removed

    async def get_user_reaction(
        self, target: ReactionTarget, user_id: str
    ) -> Reaction | None:
        """The user's current reaction on the target, if any."""
        post_id = await self._post_for(target)
        if post_id is None:
            return None
        aggregate = await self.store.snapshot(post_id)
        if isinstance(target, CommentTarget) and target.comment_id not in aggregate.comments:
            return None
        return reactions_for(aggregate, target).get(user_id)
