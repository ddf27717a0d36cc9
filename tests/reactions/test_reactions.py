"""Tests for comment and post reactions."""

import asyncio
from uuid import uuid4

import pytest

from engagement.bootstrap import EngagementServices
from engagement.core.errors import NotFoundError, ValidationError
from engagement.core.identity import Actor
from engagement.reactions.models import CommentTarget, PostTarget, ReactionType


POST = "hello-world"


class TestPostReactions:
    """Tests for reactions on a post."""

    @pytest.mark.asyncio
    async def test_changing_type_keeps_a_single_reaction(self, services: EngagementServices):
        target = PostTarget(POST)

        first = await services.reactions.set_reaction(target, "u", "User", ReactionType.LIKE)
        second = await services.reactions.set_reaction(target, "u", "User", "love")

        snapshot = await services.store.snapshot(POST)
        assert list(snapshot.post_reactions) == ["u"]
        assert snapshot.post_reactions["u"].type == ReactionType.LOVE
        assert second.reaction_id == first.reaction_id
        assert second.created_at == first.created_at

        metrics = await services.metrics.get(POST)
        assert metrics.reaction_counts["like"] == 0
        assert metrics.reaction_counts["love"] == 1
        assert metrics.total_reactions == 1

    @pytest.mark.asyncio
    async def test_same_type_is_a_no_op(self, services: EngagementServices):
        target = PostTarget(POST)
        await services.reactions.set_reaction(target, "u", "User", ReactionType.WOW)
        log_before = len((await services.store.snapshot(POST)).engagement_log)

        await services.reactions.set_reaction(target, "u", "User", ReactionType.WOW)

        snapshot = await services.store.snapshot(POST)
        assert len(snapshot.engagement_log) == log_before
        assert snapshot.metrics.reaction_counts["wow"] == 1

    @pytest.mark.asyncio
    async def test_counts_per_type(self, services: EngagementServices):
        target = PostTarget(POST)
        await services.reactions.set_reaction(target, "a", "A", ReactionType.LIKE)
        await services.reactions.set_reaction(target, "b", "B", ReactionType.LIKE)
        await services.reactions.set_reaction(target, "c", "C", ReactionType.ANGRY)

        metrics = await services.metrics.get(POST)

        assert metrics.reaction_counts == {
            "like": 2,
            "love": 0,
            "haha": 0,
            "wow": 0,
            "sad": 0,
            "angry": 1,
        }

    @pytest.mark.asyncio
    async def test_concurrent_reactions_by_one_user(self, services: EngagementServices):
        target = PostTarget(POST)

        await asyncio.gather(
            *(
                services.reactions.set_reaction(target, "u", "User", reaction_type)
                for reaction_type in ReactionType
            )
        )

        snapshot = await services.store.snapshot(POST)
        assert list(snapshot.post_reactions) == ["u"]
        assert snapshot.metrics.total_reactions == 1

    @pytest.mark.asyncio
    async def test_remove(self, services: EngagementServices):
        target = PostTarget(POST)
        await services.reactions.set_reaction(target, "u", "User", ReactionType.SAD)

        assert await services.reactions.remove_reaction(target, "u") is True
        assert await services.reactions.remove_reaction(target, "u") is False
        assert await services.reactions.get_user_reaction(target, "u") is None
        assert (await services.metrics.get(POST)).total_reactions == 0

    @pytest.mark.asyncio
    async def test_unknown_type(self, services: EngagementServices):
        with pytest.raises(ValidationError):
            await services.reactions.set_reaction(PostTarget(POST), "u", "User", "meh")

    @pytest.mark.asyncio
    async def test_user_required(self, services: EngagementServices):
        with pytest.raises(ValidationError):
            await services.reactions.set_reaction(PostTarget(POST), "", "User", "like")


class TestCommentReactions:
    """Tests for reactions on a comment."""

    @pytest.mark.asyncio
    async def test_reaction_is_stored_on_the_comment(
        self, services: EngagementServices, alice: Actor
    ):
        comment = await services.comments.create_comment(POST, "Hi", alice)
        target = CommentTarget(comment.comment_id)

        reaction = await services.reactions.set_reaction(target, "bob", "Bob", "haha")

        assert reaction.target == target
        stored = await services.comments.get_comment(comment.comment_id)
        assert stored.reaction_counts()["haha"] == 1
        assert await services.reactions.get_user_reaction(target, "bob") == reaction

    @pytest.mark.asyncio
    async def test_comment_reactions_do_not_touch_post_counts(
        self, services: EngagementServices, alice: Actor
    ):
        comment = await services.comments.create_comment(POST, "Hi", alice)

        await services.reactions.set_reaction(
            CommentTarget(comment.comment_id), "bob", "Bob", ReactionType.LIKE
        )

        assert (await services.metrics.get(POST)).total_reactions == 0

    @pytest.mark.asyncio
    async def test_one_reaction_per_user(self, services: EngagementServices, alice: Actor):
        comment = await services.comments.create_comment(POST, "Hi", alice)
        target = CommentTarget(comment.comment_id)

        for reaction_type in ReactionType:
            await services.reactions.set_reaction(target, "bob", "Bob", reaction_type)

        stored = await services.comments.get_comment(comment.comment_id)
        assert stored.reaction_total == 1
        assert stored.reactions["bob"].type == ReactionType.ANGRY

    @pytest.mark.asyncio
    async def test_missing_comment(self, services: EngagementServices):
        target = CommentTarget(uuid4())

        with pytest.raises(NotFoundError):
            await services.reactions.set_reaction(target, "bob", "Bob", "like")
        assert await services.reactions.remove_reaction(target, "bob") is False
        assert await services.reactions.get_user_reaction(target, "bob") is None
