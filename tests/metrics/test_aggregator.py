"""Tests for engagement metrics."""

import pytest

from engagement.bootstrap import EngagementServices
from engagement.comments.models import ModerationStatus
from engagement.core.identity import Actor
from engagement.metrics import compute_metrics
from engagement.reactions.models import PostTarget, ReactionType


POST = "hello-world"


class TestMetricsAggregator:
    """Tests for MetricsAggregator."""

    @pytest.mark.asyncio
    async def test_untouched_post_has_zero_row(self, services: EngagementServices):
        metrics = await services.metrics.get("never-seen")

        assert metrics.post_id == "never-seen"
        assert metrics.view_count == 0
        assert metrics.comment_count == 0
        assert metrics.average_rating == 0
        assert metrics.total_reactions == 0
        assert metrics.last_updated is None

    @pytest.mark.asyncio
    async def test_views_count_unique_viewers(self, services: EngagementServices):
        await services.metrics.record_view(POST, "a")
        await services.metrics.record_view(POST, "a", duration=12.5)
        await services.metrics.record_view(POST, "b")

        metrics = await services.metrics.get(POST)

        assert metrics.view_count == 3
        assert metrics.unique_view_count == 2
        assert metrics.last_updated is not None

    @pytest.mark.asyncio
    async def test_shares(self, services: EngagementServices):
        await services.metrics.record_share(POST, "a", "twitter")
        await services.metrics.record_share(POST, "a", "linkedin")

        snapshot = await services.store.snapshot(POST)

        assert snapshot.metrics.share_count == 2
        assert [e.details for e in snapshot.engagement_log] == ["twitter", "linkedin"]

    @pytest.mark.asyncio
    async def test_refresh_is_idempotent(
        self, services: EngagementServices, alice: Actor, moderator: Actor
    ):
        comment = await services.comments.create_comment(POST, "Hi", alice)
        await services.comments.moderate_comment(
            comment.comment_id, ModerationStatus.APPROVED, moderator
        )
        await services.reactions.set_reaction(PostTarget(POST), "b", "B", ReactionType.LIKE)
        await services.highlights.submit_feedback(POST, "b", "B", 4)
        await services.highlights.create_highlight(POST, "b", "B", "text", 0, 4)
        await services.metrics.record_view(POST, "b")

        first = await services.metrics.refresh(POST)
        second = await services.metrics.refresh(POST)

        assert first.counters() == second.counters()
        assert second.last_updated > first.last_updated
        assert first.comment_count == 1
        assert first.reaction_counts["like"] == 1
        assert first.rating_count == 1
        assert first.average_rating == 4
        assert first.highlight_count == 1
        assert first.view_count == 1

    @pytest.mark.asyncio
    async def test_cached_row_matches_recomputation(
        self, services: EngagementServices, alice: Actor, bob: Actor
    ):
        parent = await services.comments.create_comment(POST, "Hi", alice)
        await services.comments.create_comment(POST, "Yo", bob, parent_id=parent.comment_id)
        await services.reactions.set_reaction(PostTarget(POST), "c", "C", ReactionType.WOW)
        await services.metrics.record_view(POST, "c")
        await services.metrics.record_share(POST, "c", "email")
        await services.comments.delete_comment(parent.comment_id)

        snapshot = await services.store.snapshot(POST)

        assert snapshot.metrics.counters() == compute_metrics(snapshot).counters()
