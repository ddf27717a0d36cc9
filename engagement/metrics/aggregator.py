"""Engagement metrics aggregator.

Keeps the cached ``EngagementMetrics`` row of each post in step with its
records. Managers call ``refresh_aggregate`` inside their own transaction;
the async methods here are standalone transactions.
"""

from engagement.core.clock import Clock, utc_now
from engagement.core.logging import get_logger
from engagement.metrics.compute import compute_metrics
from engagement.metrics.models import EngagementMetrics, EngagementType, create_engagement
from engagement.store.base import EngagementStore, PostAggregate


logger = get_logger(__name__)


class MetricsAggregator:
    """Maintains per-post engagement metrics."""

    def __init__(self, store: EngagementStore, clock: Clock = utc_now):
        self.store = store
        self.clock = clock

    def refresh_aggregate(self, aggregate: PostAggregate) -> EngagementMetrics:
        """Recompute the metrics row of an aggregate in place."""
        metrics = compute_metrics(aggregate)
        metrics.last_updated = self.clock()
        aggregate.metrics = metrics
        return metrics

    async def refresh(self, post_id: str) -> EngagementMetrics:
        """Recompute and store the full metrics row for a post."""
        metrics = await self.store.execute(post_id, self.refresh_aggregate)
        logger.info(
            "metrics_refreshed",
            post_id=post_id,
            comment_count=metrics.comment_count,
            rating_count=metrics.rating_count,
            total_reactions=metrics.total_reactions,
        )
        return metrics

    async def record_view(
        self, post_id: str, user_id: str, duration: float | None = None
    ) -> None:
        """Count a view; the first view by a user also counts as unique."""
        now = self.clock()

        def operation(aggregate: PostAggregate) -> bool:
            first_view = not aggregate.has_viewed(user_id)
            aggregate.engagement_log.append(
                create_engagement(
                    user_id, post_id, EngagementType.VIEW, now, duration=duration
                )
            )
            aggregate.metrics.view_count += 1
            if first_view:
                aggregate.metrics.unique_view_count += 1
            aggregate.metrics.last_updated = now
            return first_view

        first_view = await self.store.execute(post_id, operation)
        logger.info(
            "post_view_recorded", post_id=post_id, user_id=user_id, unique=first_view
        )

    async def record_share(self, post_id: str, user_id: str, platform: str) -> None:
        """Count a share of the post on an external platform."""
        now = self.clock()

        def operation(aggregate: PostAggregate) -> None:
            aggregate.engagement_log.append(
                create_engagement(
                    user_id, post_id, EngagementType.SHARE, now, details=platform
                )
            )
            aggregate.metrics.share_count += 1
            aggregate.metrics.last_updated = now

        await self.store.execute(post_id, operation)
        logger.info(
            "post_share_recorded", post_id=post_id, user_id=user_id, platform=platform
        )

    async def get(self, post_id: str) -> EngagementMetrics:
        """Cached metrics row, created with zero values on first access."""
        return await self.store.execute(post_id, lambda aggregate: aggregate.metrics)
