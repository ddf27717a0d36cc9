"""Tests for the comment tree: creation, editing, moderation, cascades, listing."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from engagement.bootstrap import EngagementServices
from engagement.comments.models import CommentSort, ModerationStatus
from engagement.core.errors import NotFoundError, ValidationError
from engagement.core.identity import Actor
from engagement.notifications.models import NotificationType
from engagement.reactions.models import CommentTarget, ReactionType


POST = "hello-world"


async def approved(services: EngagementServices, author: Actor, content: str, **kwargs):
    comment = await services.comments.create_comment(POST, content, author, **kwargs)
    await services.comments.moderate_comment(
        comment.comment_id, ModerationStatus.APPROVED, Actor("mod", "Moderator")
    )
    return comment


class TestCreateComment:
    """Tests for create_comment."""

    @pytest.mark.asyncio
    async def test_new_comment_is_pending_with_no_replies(
        self, services: EngagementServices, alice: Actor
    ):
        comment = await services.comments.create_comment(POST, "  First!  ", alice)

        assert comment.moderation_status == ModerationStatus.PENDING
        assert comment.reply_count == 0
        assert comment.content == "First!"
        assert comment.author == alice
        assert comment.parent_id is None

    @pytest.mark.asyncio
    async def test_pending_comment_not_counted_in_metrics(
        self, services: EngagementServices, alice: Actor
    ):
        await services.comments.create_comment(POST, "Hello", alice)

        metrics = await services.metrics.get(POST)
        assert metrics.comment_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    async def test_empty_content_rejected(
        self, services: EngagementServices, alice: Actor, content: str
    ):
        with pytest.raises(ValidationError):
            await services.comments.create_comment(POST, content, alice)

    @pytest.mark.asyncio
    async def test_length_limit(self, services: EngagementServices, alice: Actor):
        await services.comments.create_comment(POST, "x" * 1000, alice)

        with pytest.raises(ValidationError):
            await services.comments.create_comment(POST, "x" * 1001, alice)

    @pytest.mark.asyncio
    async def test_unknown_parent_rejected(
        self, services: EngagementServices, alice: Actor
    ):
        with pytest.raises(NotFoundError):
            await services.comments.create_comment(POST, "Reply", alice, parent_id=uuid4())

        snapshot = await services.store.snapshot(POST)
        assert snapshot.comments == {}

    @pytest.mark.asyncio
    async def test_parent_on_another_post_rejected(
        self, services: EngagementServices, alice: Actor, bob: Actor
    ):
        other = await services.comments.create_comment("other-post", "Hi", alice)

        with pytest.raises(NotFoundError):
            await services.comments.create_comment(
                POST, "Reply", bob, parent_id=other.comment_id
            )

    @pytest.mark.asyncio
    async def test_reply_increments_parent_and_notifies_author(
        self, services: EngagementServices, alice: Actor, bob: Actor
    ):
        parent = await services.comments.create_comment(POST, "Question?", alice)
        reply = await services.comments.create_comment(
            POST, "Answer.", bob, parent_id=parent.comment_id
        )

        stored = await services.comments.get_comment(parent.comment_id)
        assert stored.reply_count == 1

        notifications = await services.notifications.list_notifications("alice")
        assert len(notifications) == 1
        notification = notifications[0]
        assert notification.type == NotificationType.REPLY
        assert notification.comment_id == reply.comment_id
        assert notification.parent_comment_id == parent.comment_id
        assert notification.actor_id == "bob"
        assert notification.message == "Bob replied to your comment"
        assert notification.post_title == "Untitled post"

    @pytest.mark.asyncio
    async def test_self_reply_does_not_notify(
        self, services: EngagementServices, alice: Actor
    ):
        parent = await services.comments.create_comment(POST, "Question?", alice)
        await services.comments.create_comment(
            POST, "Never mind.", alice, parent_id=parent.comment_id
        )

        assert await services.notifications.list_notifications("alice") == []

    @pytest.mark.asyncio
    async def test_post_title_comes_from_resolver(
        self, services: EngagementServices, alice: Actor, bob: Actor
    ):
        services.comments.post_title_resolver = AsyncMock(return_value="Hello World")
        parent = await services.comments.create_comment(POST, "Question?", alice)
        await services.comments.create_comment(
            POST, "Answer.", bob, parent_id=parent.comment_id
        )

        (notification,) = await services.notifications.list_notifications("alice")
        assert notification.post_title == "Hello World"
        services.comments.post_title_resolver.assert_awaited_with(POST)

    @pytest.mark.asyncio
    async def test_comment_creation_is_logged_as_engagement(
        self, services: EngagementServices, alice: Actor
    ):
        comment = await services.comments.create_comment(POST, "Hi", alice)

        snapshot = await services.store.snapshot(POST)
        (entry,) = snapshot.engagement_log
        assert entry.engagement_type.value == "comment"
        assert entry.user_id == "alice"
        assert entry.details == str(comment.comment_id)

    @pytest.mark.asyncio
    async def test_comment_from_highlight_links_both_ways(
        self, services: EngagementServices, alice: Actor
    ):
        highlight = await services.highlights.create_highlight(
            POST, "alice", "Alice", "a quotable line", 10, 25
        )
        comment = await services.comments.create_comment(
            POST, "So true", alice, highlight_id=highlight.highlight_id
        )

        assert comment.highlight_id == highlight.highlight_id
        assert comment.highlight_text == "a quotable line"
        (stored,) = await services.highlights.list_highlights(POST)
        assert stored.comment_id == comment.comment_id

    @pytest.mark.asyncio
    async def test_highlight_links_to_a_single_comment(
        self, services: EngagementServices, alice: Actor, bob: Actor
    ):
        highlight = await services.highlights.create_highlight(
            POST, "alice", "Alice", "a quotable line", 10, 25
        )
        first = await services.comments.create_comment(
            POST, "So true", alice, highlight_id=highlight.highlight_id
        )

        with pytest.raises(ValidationError):
            await services.comments.create_comment(
                POST, "Me too", bob, highlight_id=highlight.highlight_id
            )

        snapshot = await services.store.snapshot(POST)
        assert list(snapshot.comments) == [first.comment_id]
        assert snapshot.highlights[highlight.highlight_id].comment_id == first.comment_id

    @pytest.mark.asyncio
    async def test_highlight_can_be_reused_after_its_comment_is_deleted(
        self, services: EngagementServices, alice: Actor, bob: Actor
    ):
        highlight = await services.highlights.create_highlight(
            POST, "alice", "Alice", "a quotable line", 10, 25
        )
        first = await services.comments.create_comment(
            POST, "So true", alice, highlight_id=highlight.highlight_id
        )
        await services.comments.delete_comment(first.comment_id)

        second = await services.comments.create_comment(
            POST, "Me too", bob, highlight_id=highlight.highlight_id
        )

        (stored,) = await services.highlights.list_highlights(POST)
        assert stored.comment_id == second.comment_id

    @pytest.mark.asyncio
    async def test_unknown_highlight_rejected(
        self, services: EngagementServices, alice: Actor
    ):
        with pytest.raises(NotFoundError):
            await services.comments.create_comment(
                POST, "So true", alice, highlight_id=uuid4()
            )


class TestUpdateComment:
    """Tests for update_comment."""

    @pytest.mark.asyncio
    async def test_edit_marks_edited_and_keeps_status(
        self, services: EngagementServices, alice: Actor
    ):
        comment = await approved(services, alice, "Typo hre")

        updated = await services.comments.update_comment(comment.comment_id, "Typo here")

        assert updated.content == "Typo here"
        assert updated.is_edited is True
        assert updated.updated_at is not None
        assert updated.updated_at > updated.created_at
        assert updated.moderation_status == ModerationStatus.APPROVED

    @pytest.mark.asyncio
    async def test_missing_comment(self, services: EngagementServices):
        with pytest.raises(NotFoundError):
            await services.comments.update_comment(uuid4(), "text")

    @pytest.mark.asyncio
    async def test_invalid_content(self, services: EngagementServices, alice: Actor):
        comment = await services.comments.create_comment(POST, "ok", alice)

        with pytest.raises(ValidationError):
            await services.comments.update_comment(comment.comment_id, " ")

    @pytest.mark.asyncio
    async def test_edit_does_not_notify(self, services: EngagementServices, alice: Actor):
        comment = await services.comments.create_comment(POST, "ok", alice)
        await services.comments.update_comment(comment.comment_id, "okay")

        assert await services.notifications.list_notifications("alice") == []


class TestModerateComment:
    """Tests for moderate_comment."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [ModerationStatus.APPROVED, ModerationStatus.REJECTED])
    async def test_decision_notifies_author(
        self,
        services: EngagementServices,
        alice: Actor,
        moderator: Actor,
        status: ModerationStatus,
    ):
        comment = await services.comments.create_comment(POST, "Hi", alice)

        result = await services.comments.moderate_comment(
            comment.comment_id, status, moderator
        )

        assert result.moderation_status == status
        (notification,) = await services.notifications.list_notifications("alice")
        assert notification.type == NotificationType.MODERATION
        assert notification.message == f"Your comment was {status.value}"
        assert notification.actor_id == "mod"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [ModerationStatus.SPAM, ModerationStatus.PENDING])
    async def test_other_statuses_do_not_notify(
        self,
        services: EngagementServices,
        alice: Actor,
        moderator: Actor,
        status: ModerationStatus,
    ):
        comment = await services.comments.create_comment(POST, "Hi", alice)

        await services.comments.moderate_comment(comment.comment_id, status, moderator)

        assert await services.notifications.list_notifications("alice") == []

    @pytest.mark.asyncio
    async def test_approval_and_unapproval_refresh_comment_count(
        self, services: EngagementServices, alice: Actor, moderator: Actor
    ):
        comment = await services.comments.create_comment(POST, "Hi", alice)

        await services.comments.moderate_comment(
            comment.comment_id, ModerationStatus.APPROVED, moderator
        )
        assert (await services.metrics.get(POST)).comment_count == 1

        await services.comments.moderate_comment(
            comment.comment_id, ModerationStatus.PENDING, moderator
        )
        assert (await services.metrics.get(POST)).comment_count == 0

    @pytest.mark.asyncio
    async def test_unknown_status(
        self, services: EngagementServices, alice: Actor, moderator: Actor
    ):
        comment = await services.comments.create_comment(POST, "Hi", alice)

        with pytest.raises(ValidationError):
            await services.comments.moderate_comment(comment.comment_id, "banned", moderator)

    @pytest.mark.asyncio
    async def test_missing_comment(self, services: EngagementServices, moderator: Actor):
        with pytest.raises(NotFoundError):
            await services.comments.moderate_comment(
                uuid4(), ModerationStatus.APPROVED, moderator
            )


class TestDeleteComment:
    """Tests for the delete cascade."""

    @pytest.mark.asyncio
    async def test_deleting_reply_decrements_parent(
        self, services: EngagementServices, alice: Actor, bob: Actor
    ):
        c1 = await approved(services, alice, "Parent")
        c2 = await services.comments.create_comment(
            POST, "Child", bob, parent_id=c1.comment_id
        )
        assert (await services.comments.get_comment(c1.comment_id)).reply_count == 1

        await services.comments.delete_comment(c2.comment_id)

        assert (await services.comments.get_comment(c1.comment_id)).reply_count == 0
        assert await services.comments.get_comment(c2.comment_id) is None

    @pytest.mark.asyncio
    async def test_deleting_root_removes_whole_subtree(
        self,
        services: EngagementServices,
        alice: Actor,
        bob: Actor,
        carol: Actor,
    ):
        c1 = await services.comments.create_comment(POST, "Level 1", alice)
        c2 = await services.comments.create_comment(
            POST, "Level 2", bob, parent_id=c1.comment_id
        )
        c3 = await services.comments.create_comment(
            POST, "Level 3", carol, parent_id=c2.comment_id
        )
        for comment in (c1, c2, c3):
            await services.reactions.set_reaction(
                CommentTarget(comment.comment_id), "dave", "Dave", ReactionType.LIKE
            )
        await services.comments.moderate_comment(
            c3.comment_id, ModerationStatus.APPROVED, Actor("mod", "Moderator")
        )

        await services.comments.delete_comment(c1.comment_id)

        snapshot = await services.store.snapshot(POST)
        assert snapshot.comments == {}
        assert snapshot.notifications == {}
        for comment in (c1, c2, c3):
            assert await services.store.post_for_comment(comment.comment_id) is None
            assert (
                await services.reactions.get_user_reaction(
                    CommentTarget(comment.comment_id), "dave"
                )
                is None
            )
        for user_id in ("alice", "bob", "carol"):
            assert await services.notifications.list_notifications(user_id) == []

    @pytest.mark.asyncio
    async def test_sibling_branches_survive(
        self, services: EngagementServices, alice: Actor, bob: Actor, carol: Actor
    ):
        root = await services.comments.create_comment(POST, "Root", alice)
        doomed = await services.comments.create_comment(
            POST, "Doomed", bob, parent_id=root.comment_id
        )
        await services.comments.create_comment(
            POST, "Doomed child", carol, parent_id=doomed.comment_id
        )
        keeper = await services.comments.create_comment(
            POST, "Keeper", carol, parent_id=root.comment_id
        )

        await services.comments.delete_comment(doomed.comment_id)

        snapshot = await services.store.snapshot(POST)
        assert set(snapshot.comments) == {root.comment_id, keeper.comment_id}
        assert snapshot.comments[root.comment_id].reply_count == 1
        # alice still has the reply notification from the keeper
        (notification,) = await services.notifications.list_notifications("alice")
        assert notification.comment_id == keeper.comment_id

    @pytest.mark.asyncio
    async def test_deleting_clears_highlight_link(
        self, services: EngagementServices, alice: Actor
    ):
        highlight = await services.highlights.create_highlight(
            POST, "alice", "Alice", "line", 0, 4
        )
        comment = await services.comments.create_comment(
            POST, "Nice", alice, highlight_id=highlight.highlight_id
        )

        await services.comments.delete_comment(comment.comment_id)

        (stored,) = await services.highlights.list_highlights(POST)
        assert stored.comment_id is None

    @pytest.mark.asyncio
    async def test_failed_cascade_leaves_store_untouched(
        self,
        services: EngagementServices,
        alice: Actor,
        bob: Actor,
        monkeypatch: pytest.MonkeyPatch,
    ):
        c1 = await services.comments.create_comment(POST, "Parent", alice)
        c2 = await services.comments.create_comment(
            POST, "Child", bob, parent_id=c1.comment_id
        )
        before = (await services.store.snapshot(POST)).to_dict()

        def explode(aggregate):
            raise RuntimeError("metrics backend down")

        monkeypatch.setattr(services.metrics, "refresh_aggregate", explode)

        with pytest.raises(RuntimeError):
            await services.comments.delete_comment(c1.comment_id)

        assert (await services.store.snapshot(POST)).to_dict() == before
        assert await services.store.post_for_comment(c2.comment_id) == POST

    @pytest.mark.asyncio
    async def test_missing_comment(self, services: EngagementServices):
        with pytest.raises(NotFoundError):
            await services.comments.delete_comment(uuid4())

    @pytest.mark.asyncio
    async def test_reply_counts_stay_consistent(
        self, services: EngagementServices, alice: Actor, bob: Actor
    ):
        root = await services.comments.create_comment(POST, "Root", alice)
        replies = [
            await services.comments.create_comment(
                POST, f"Reply {i}", bob, parent_id=root.comment_id
            )
            for i in range(4)
        ]
        nested = await services.comments.create_comment(
            POST, "Nested", alice, parent_id=replies[0].comment_id
        )
        await services.comments.delete_comment(replies[1].comment_id)
        await services.comments.delete_comment(nested.comment_id)
        await services.comments.delete_comment(replies[3].comment_id)

        snapshot = await services.store.snapshot(POST)
        for comment in snapshot.comments.values():
            assert comment.reply_count == len(snapshot.children_of(comment.comment_id))
        assert snapshot.comments[root.comment_id].reply_count == 2


class TestListComments:
    """Tests for list_comments."""

    @pytest.mark.asyncio
    async def test_only_approved_comments_are_listed(
        self, services: EngagementServices, alice: Actor, moderator: Actor
    ):
        c1 = await services.comments.create_comment(POST, "C1", alice)
        await services.comments.create_comment(POST, "Still pending", alice)

        assert list(await services.comments.list_comments(POST)) == []

        await services.comments.moderate_comment(
            c1.comment_id, ModerationStatus.APPROVED, moderator
        )
        listing = await services.comments.list_comments(POST, sort=CommentSort.NEWEST)

        assert [c.comment_id for c in listing] == [c1.comment_id]

    @pytest.mark.asyncio
    async def test_newest_and_oldest(self, services: EngagementServices, alice: Actor):
        first = await approved(services, alice, "first")
        second = await approved(services, alice, "second")
        third = await approved(services, alice, "third")

        newest = await services.comments.list_comments(POST, sort="newest")
        oldest = await services.comments.list_comments(POST, sort=CommentSort.OLDEST)

        assert [c.content for c in newest] == ["third", "second", "first"]
        assert [c.comment_id for c in oldest] == [
            first.comment_id,
            second.comment_id,
            third.comment_id,
        ]

    @pytest.mark.asyncio
    async def test_popular_orders_by_reactions_then_replies_then_recency(
        self, services: EngagementServices, alice: Actor, bob: Actor
    ):
        quiet = await approved(services, alice, "quiet")
        replied = await approved(services, alice, "replied")
        liked = await approved(services, alice, "liked")
        also_quiet = await approved(services, alice, "also quiet")

        await services.comments.create_comment(
            POST, "reply", bob, parent_id=replied.comment_id
        )
        for user in ("u1", "u2"):
            await services.reactions.set_reaction(
                CommentTarget(liked.comment_id), user, user, ReactionType.LOVE
            )

        listing = await services.comments.list_comments(POST, sort=CommentSort.POPULAR)

        assert [c.comment_id for c in listing] == [
            liked.comment_id,
            replied.comment_id,
            also_quiet.comment_id,
            quiet.comment_id,
        ]

    @pytest.mark.asyncio
    async def test_replies_listed_per_parent(
        self, services: EngagementServices, alice: Actor, bob: Actor
    ):
        root = await approved(services, alice, "root")
        reply = await approved(services, bob, "reply", parent_id=root.comment_id)

        top = await services.comments.list_comments(POST)
        replies = await services.comments.list_comments(POST, parent_id=root.comment_id)

        assert [c.comment_id for c in top] == [root.comment_id]
        assert [c.comment_id for c in replies] == [reply.comment_id]

    @pytest.mark.asyncio
    async def test_listing_is_restartable(
        self, services: EngagementServices, alice: Actor
    ):
        for text in ("a", "b", "c"):
            await approved(services, alice, text)

        listing = await services.comments.list_comments(POST)

        assert list(listing) == list(listing)
        assert len(listing) == 3
        assert [c.content for c in listing.page(1, 1)] == ["b"]
        assert listing.page(3, 10) == []

    @pytest.mark.asyncio
    async def test_unknown_sort(self, services: EngagementServices):
        with pytest.raises(ValidationError):
            await services.comments.list_comments(POST, sort="random")
