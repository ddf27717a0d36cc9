"""Wiring of the engagement store and its managers."""

from dataclasses import dataclass

import redis.asyncio as redis

from engagement.comments.service import CommentService, PostTitleResolver
from engagement.config import Settings
from engagement.core.clock import Clock, utc_now
from engagement.core.logging import get_logger
from engagement.highlights.service import HighlightService
from engagement.metrics.aggregator import MetricsAggregator
from engagement.notifications.service import NotificationDispatcher
from engagement.reactions.service import ReactionService
from engagement.store import EngagementStore, InMemoryEngagementStore, RedisEngagementStore


logger = get_logger(__name__)


@dataclass
class EngagementServices:
    """The five managers sharing one engagement store."""

    store: EngagementStore
    comments: CommentService
    reactions: ReactionService
    highlights: HighlightService
    notifications: NotificationDispatcher
    metrics: MetricsAggregator

    async def close(self) -> None:
        await self.store.close()


def build_store(settings: Settings, client: redis.Redis | None = None) -> EngagementStore:
    """Create the store selected by ``settings.store_backend``."""
    if settings.store_backend == "redis":
        if client is None:
            msg = "Redis store backend selected but no Redis client is available"
            raise RuntimeError(msg)
        return RedisEngagementStore(
            client,
            key_prefix=settings.redis_key_prefix,
            max_retries=settings.store_max_retries,
            verify_invariants=settings.verify_invariants,
        )
    return InMemoryEngagementStore(verify_invariants=settings.verify_invariants)


def build_services(
    store: EngagementStore,
    settings: Settings,
    clock: Clock = utc_now,
    post_title_resolver: PostTitleResolver | None = None,
) -> EngagementServices:
    """Create every manager on top of ``store``."""
    notifications = NotificationDispatcher(store, clock=clock)
    metrics = MetricsAggregator(store, clock=clock)
    services = EngagementServices(
        store=store,
        comments=CommentService(
            store,
            notifications,
            metrics,
            max_length=settings.comment_max_length,
            default_post_title=settings.default_post_title,
            post_title_resolver=post_title_resolver,
            clock=clock,
        ),
        reactions=ReactionService(store, metrics, clock=clock),
        highlights=HighlightService(store, metrics, clock=clock),
        notifications=notifications,
        metrics=metrics,
    )
    logger.info("engagement_services_initialized", store_backend=store.backend)
    return services
