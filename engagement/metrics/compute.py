"""From-scratch metric computation over a post's records."""

from typing import TYPE_CHECKING

from engagement.metrics.models import EngagementMetrics, EngagementType
from engagement.reactions.models import empty_reaction_counts


if TYPE_CHECKING:
    from engagement.store.base import PostAggregate


def compute_metrics(aggregate: "PostAggregate") -> EngagementMetrics:
    """Recompute every counter for a post.

    Comment, reaction, rating and highlight figures come from the live
    records; view and share figures come from the engagement log.
    """
    reaction_counts = empty_reaction_counts()
    for reaction in aggregate.post_reactions.values():
        reaction_counts[reaction.type.value] += 1

    ratings = [feedback.rating for feedback in aggregate.feedback.values()]
    average_rating = sum(ratings) / len(ratings) if ratings else 0.0

    views = [
        entry
        for entry in aggregate.engagement_log
        if entry.engagement_type == EngagementType.VIEW
    ]
    shares = sum(
        1
        for entry in aggregate.engagement_log
        if entry.engagement_type == EngagementType.SHARE
    )

    return EngagementMetrics(
        post_id=aggregate.post_id,
        view_count=len(views),
        unique_view_count=len({entry.user_id for entry in views}),
        comment_count=sum(
            1 for comment in aggregate.comments.values() if comment.is_visible
        ),
        reaction_counts=reaction_counts,
        average_rating=average_rating,
        rating_count=len(ratings),
        highlight_count=len(aggregate.highlights),
        share_count=shares,
        last_updated=aggregate.metrics.last_updated,
    )
