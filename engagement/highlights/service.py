"""Highlight and feedback service layer."""

from engagement.core.clock import Clock, utc_now
from engagement.core.errors import ValidationError
from engagement.core.logging import get_logger
from engagement.highlights.models import (
    MAX_RATING,
    MIN_RATING,
    ContentFeedback,
    Highlight,
    create_feedback,
    create_highlight,
)
from engagement.metrics.aggregator import MetricsAggregator
from engagement.metrics.models import EngagementType, create_engagement
from engagement.store.base import EngagementStore, PostAggregate


logger = get_logger(__name__)


def validate_offsets(start_offset: int, end_offset: int) -> None:
    for offset in (start_offset, end_offset):
        if isinstance(offset, bool) or not isinstance(offset, int):
            raise ValidationError("Highlight offsets must be integers")
    if start_offset < 0:
        raise ValidationError("Highlight start offset cannot be negative")
    if start_offset >= end_offset:
        raise ValidationError("Highlight start offset must be before end offset")


def validate_rating(rating: int) -> None:
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Rating must be a whole number")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")


class HighlightService:
    """Service for text highlights and post ratings."""

    def __init__(
        self,
        store: EngagementStore,
        aggregator: MetricsAggregator,
        clock: Clock = utc_now,
    ):
        self.store = store
        self.aggregator = aggregator
        self.clock = clock

    async def create_highlight(
        self,
        post_id: str,
        user_id: str,
        user_name: str,
        text: str,
        start_offset: int,
        end_offset: int,
    ) -> Highlight:
        """Record a highlighted span. A user may highlight a post many times."""
        validate_offsets(start_offset, end_offset)
        if not text or not text.strip():
            raise ValidationError("Highlighted text cannot be empty")
        now = self.clock()

        def operation(aggregate: PostAggregate) -> Highlight:
            highlight = create_highlight(
                post_id, user_id, user_name, text, start_offset, end_offset, now
            )
            aggregate.highlights[highlight.highlight_id] = highlight
            aggregate.engagement_log.append(
                create_engagement(
                    user_id,
                    post_id,
                    EngagementType.HIGHLIGHT,
                    now,
                    details=str(highlight.highlight_id),
                )
            )
            self.aggregator.refresh_aggregate(aggregate)
            return highlight

        highlight = await self.store.execute(post_id, operation)
        logger.info(
            "highlight_created",
            highlight_id=str(highlight.highlight_id),
            post_id=post_id,
            user_id=user_id,
        )
        return highlight

    async def list_highlights(self, post_id: str) -> list[Highlight]:
        """Highlights of a post, oldest first."""
        aggregate = await self.store.snapshot(post_id)
        return sorted(
            aggregate.highlights.values(),
            key=lambda h: (h.created_at, h.start_offset, str(h.highlight_id)),
        )

    async def submit_feedback(
        self,
        post_id: str,
        user_id: str,
        user_name: str,
        rating: int,
        feedback_text: str | None = None,
    ) -> ContentFeedback:
        """Rate a post. A second rating by the same user replaces the first."""
        validate_rating(rating)
        now = self.clock()

        def operation(aggregate: PostAggregate) -> ContentFeedback:
            existing = aggregate.feedback.get(user_id)
            if existing is not None:
                existing.rating = rating
                existing.feedback = feedback_text
                existing.user_name = user_name
                existing.updated_at = now
                feedback = existing
            else:
                feedback = create_feedback(
                    post_id, user_id, user_name, rating, now, feedback_text
                )
                aggregate.feedback[user_id] = feedback

            aggregate.engagement_log.append(
                create_engagement(
                    user_id, post_id, EngagementType.RATING, now, details=str(rating)
                )
            )
            self.aggregator.refresh_aggregate(aggregate)
            return feedback

        feedback = await self.store.execute(post_id, operation)
        logger.info(
            "feedback_submitted", post_id=post_id, user_id=user_id, rating=rating
        )
        return feedback

    async def list_feedback(self, post_id: str) -> list[ContentFeedback]:
        """Ratings recorded for a post, oldest first."""
        aggregate = await self.store.snapshot(post_id)
        return sorted(
            aggregate.feedback.values(), key=lambda f: (f.created_at, f.user_id)
        )
