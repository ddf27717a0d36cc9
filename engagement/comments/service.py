"""Comment system service layer.

Business logic for:
- Comment creation with threading and highlight references
- Editing, moderation and cascading deletion
- Listing approved comments in newest/oldest/popular order

Every mutation is one store transaction covering the comment, its parent's
reply count, the notifications it emits, the engagement log and the post's
metrics row.
"""

from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from uuid import UUID

from engagement.comments.models import (
    Comment,
    CommentSort,
    ModerationStatus,
    create_comment,
)
from engagement.core.clock import Clock, utc_now
from engagement.core.errors import InvariantViolationError, NotFoundError, ValidationError
from engagement.core.identity import Actor
from engagement.core.logging import get_logger
from engagement.metrics.aggregator import MetricsAggregator
from engagement.metrics.models import EngagementType, create_engagement
from engagement.notifications.models import create_moderation_event, create_reply_event
from engagement.notifications.service import NotificationDispatcher
from engagement.store.base import EngagementStore, PostAggregate


logger = get_logger(__name__)

PostTitleResolver = Callable[[str], Awaitable[str | None]]

NOTIFY_ON_STATUS = frozenset({ModerationStatus.APPROVED, ModerationStatus.REJECTED})


# ==============================================================================
# Listing
# ==============================================================================


def _sort_key(sort: CommentSort) -> tuple[Callable[[Comment], tuple], bool]:
    if sort == CommentSort.OLDEST:
        return (lambda c: (c.created_at, str(c.comment_id))), False
    if sort == CommentSort.POPULAR:
        return (
            lambda c: (c.reaction_total, c.reply_count, c.created_at, str(c.comment_id))
        ), True
    return (lambda c: (c.created_at, str(c.comment_id))), True


class CommentListing:
    """Ordered, restartable view over the approved comments of one thread level.

    Sorting happens on iteration, so each ``iter()`` starts from the top.
    """

    def __init__(self, comments: list[Comment], sort: CommentSort):
        self._comments = tuple(comments)
        self.sort = sort

    def __iter__(self) -> Iterator[Comment]:
        key, reverse = _sort_key(self.sort)
        yield from sorted(self._comments, key=key, reverse=reverse)

    def __len__(self) -> int:
        return len(self._comments)

    def page(self, offset: int, limit: int) -> list[Comment]:
        """Slice of the ordered listing."""
        items: list[Comment] = []
        for index, comment in enumerate(self):
            if index >= offset + limit:
                break
            if index >= offset:
                items.append(comment)
        return items


@dataclass(frozen=True)
class CascadeResult:
    """What a comment deletion removed."""

    comments: int
    reactions: int
    notifications: int
    highlights_unlinked: int


# ==============================================================================
# Comment Service
# ==============================================================================


class CommentService:
    """Service for comment management."""

    def __init__(
        self,
        store: EngagementStore,
        dispatcher: NotificationDispatcher,
        aggregator: MetricsAggregator,
        *,
        max_length: int = 1000,
        default_post_title: str = "Untitled post",
        post_title_resolver: PostTitleResolver | None = None,
        clock: Clock = utc_now,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.aggregator = aggregator
        self.max_length = max_length
        self.default_post_title = default_post_title
        self.post_title_resolver = post_title_resolver
        self.clock = clock

    def validate_content(self, content: str) -> str:
        """Strip and check comment text.

        Raises:
            ValidationError: If the text is empty or longer than max_length
        """
        text = (content or "").strip()
        if not text:
            logger.warning("comment_rejected", reason="empty_content")
            raise ValidationError("Comment content cannot be empty")
        if len(text) > self.max_length:
            logger.warning("comment_rejected", reason="too_long", length=len(text))
            raise ValidationError(
                f"Comment content exceeds {self.max_length} characters"
            )
        return text

    async def post_title(self, post_id: str) -> str:
        if self.post_title_resolver is not None:
            title = await self.post_title_resolver(post_id)
            if title:
                return title
        return self.default_post_title

    async def _owning_post(self, comment_id: UUID) -> str:
        post_id = await self.store.post_for_comment(comment_id)
        if post_id is None:
            raise NotFoundError(f"Comment {comment_id} not found")
        return post_id

    @staticmethod
    def _require(aggregate: PostAggregate, comment_id: UUID) -> Comment:
        comment = aggregate.comments.get(comment_id)
        if comment is None:
            raise NotFoundError(f"Comment {comment_id} not found")
        return comment

    # ==========================================================================
    # Create / Update
    # ==========================================================================

    async def create_comment(
        self,
        post_id: str,
        content: str,
        author: Actor,
        parent_id: UUID | None = None,
        highlight_id: UUID | None = None,
    ) -> Comment:
        """Create a pending comment or reply.

        A reply bumps the parent's reply_count and notifies the parent's
        author unless they are replying to themselves. A comment created from
        a highlight copies its text and links the highlight back.
        """
        text = self.validate_content(content)
        post_title = await self.post_title(post_id) if parent_id else None
        now = self.clock()

        def operation(aggregate: PostAggregate) -> Comment:
            parent = None
            if parent_id is not None:
                parent = aggregate.comments.get(parent_id)
                if parent is None:
                    raise NotFoundError(
                        f"Parent comment {parent_id} not found on post {post_id}"
                    )

            highlight = None
            if highlight_id is not None:
                highlight = aggregate.highlights.get(highlight_id)
                if highlight is None:
                    raise NotFoundError(
                        f"Highlight {highlight_id} not found on post {post_id}"
                    )
                if highlight.comment_id is not None:
                    raise ValidationError(
                        f"Highlight {highlight_id} is already linked to a comment"
                    )

            comment = create_comment(
                post_id=post_id,
                author=author,
                content=text,
                created_at=now,
                parent_id=parent_id,
                highlight_id=highlight_id,
                highlight_text=highlight.text if highlight else None,
            )
            aggregate.comments[comment.comment_id] = comment

            if highlight is not None:
                highlight.comment_id = comment.comment_id

            if parent is not None:
                parent.reply_count += 1
                if parent.author.user_id != author.user_id:
                    self.dispatcher.append(
                        aggregate,
                        parent.author.user_id,
                        create_reply_event(
                            post_id=post_id,
                            post_title=post_title or self.default_post_title,
                            reply_id=comment.comment_id,
                            parent_comment_id=parent.comment_id,
                            replier_id=author.user_id,
                            replier_name=author.display_name,
                        ),
                    )

            aggregate.engagement_log.append(
                create_engagement(
                    author.user_id,
                    post_id,
                    EngagementType.COMMENT,
                    now,
                    details=str(comment.comment_id),
                )
            )
            self.aggregator.refresh_aggregate(aggregate)
            return comment

        comment = await self.store.execute(post_id, operation)
        logger.info(
            "comment_created",
            comment_id=str(comment.comment_id),
            post_id=post_id,
            author_id=author.user_id,
            parent_id=str(parent_id) if parent_id else None,
        )
        return comment

    async def update_comment(self, comment_id: UUID, new_content: str) -> Comment:
        """Replace a comment's text. Moderation status is left as is."""
        text = self.validate_content(new_content)
        post_id = await self._owning_post(comment_id)
        now = self.clock()

        def operation(aggregate: PostAggregate) -> Comment:
            comment = self._require(aggregate, comment_id)
            comment.content = text
            comment.is_edited = True
            comment.updated_at = now
            return comment

        comment = await self.store.execute(post_id, operation)
        logger.info("comment_updated", comment_id=str(comment_id), post_id=post_id)
        return comment

    # ==========================================================================
    # Delete
    # ==========================================================================

    @staticmethod
    def _subtree(aggregate: PostAggregate, root: Comment) -> list[Comment]:
        """Comments under ``root`` in depth-first post-order, root last."""
        children: dict[UUID, list[Comment]] = {}
        for comment in aggregate.comments.values():
            if comment.parent_id is not None:
                children.setdefault(comment.parent_id, []).append(comment)

        ordered: list[Comment] = []
        stack: list[tuple[Comment, bool]] = [(root, False)]
        while stack:
            comment, expanded = stack.pop()
            if expanded:
                ordered.append(comment)
                continue
            stack.append((comment, True))
            stack.extend((child, False) for child in children.get(comment.comment_id, []))
        return ordered

    async def delete_comment(self, comment_id: UUID) -> None:
        """Delete a comment and everything hanging off it.

        Descendants go first, then their reactions and any notification
        about a deleted comment; highlight links are cleared and the direct
        parent loses one reply. All of it commits together or not at all.
        """
        post_id = await self._owning_post(comment_id)

        def operation(aggregate: PostAggregate) -> CascadeResult:
            comment = self._require(aggregate, comment_id)
            doomed = self._subtree(aggregate, comment)
            doomed_ids = {c.comment_id for c in doomed}

            removed_reactions = 0
            for victim in doomed:
                removed_reactions += len(victim.reactions)
                del aggregate.comments[victim.comment_id]

            stale = [
                n.notification_id
                for n in aggregate.notifications.values()
                if n.references(doomed_ids)
            ]
            for notification_id in stale:
                del aggregate.notifications[notification_id]

            unlinked = 0
            for highlight in aggregate.highlights.values():
                if highlight.comment_id in doomed_ids:
                    highlight.comment_id = None
                    unlinked += 1

            if comment.parent_id is not None:
                parent = aggregate.comments.get(comment.parent_id)
                if parent is None or parent.reply_count < 1:
                    raise InvariantViolationError(
                        f"Parent of comment {comment_id} cannot lose a reply"
                    )
                parent.reply_count -= 1

            self.aggregator.refresh_aggregate(aggregate)
            return CascadeResult(
                comments=len(doomed),
                reactions=removed_reactions,
                notifications=len(stale),
                highlights_unlinked=unlinked,
            )

        result = await self.store.execute(post_id, operation)
        logger.info(
            "comment_deleted",
            comment_id=str(comment_id),
            post_id=post_id,
            deleted_comments=result.comments,
            deleted_reactions=result.reactions,
            deleted_notifications=result.notifications,
            unlinked_highlights=result.highlights_unlinked,
        )

    # ==========================================================================
    # Moderation
    # ==========================================================================

    async def moderate_comment(
        self,
        comment_id: UUID,
        status: ModerationStatus | str,
        moderator: Actor,
    ) -> Comment:
        """Set a comment's moderation status.

        Approval and rejection notify the comment's author.
        """
        try:
            new_status = ModerationStatus(status)
        except ValueError as e:
            raise ValidationError(f"Unknown moderation status: {status}") from e

        post_id = await self._owning_post(comment_id)
        post_title = await self.post_title(post_id)

        def operation(aggregate: PostAggregate) -> Comment:
            comment = self._require(aggregate, comment_id)
            comment.moderation_status = new_status
            if new_status in NOTIFY_ON_STATUS:
                self.dispatcher.append(
                    aggregate,
                    comment.author.user_id,
                    create_moderation_event(
                        post_id=post_id,
                        post_title=post_title,
                        comment_id=comment.comment_id,
                        moderator_id=moderator.user_id,
                        moderator_name=moderator.display_name,
                        status=new_status.value,
                    ),
                )
            self.aggregator.refresh_aggregate(aggregate)
            return comment

        comment = await self.store.execute(post_id, operation)
        logger.info(
            "comment_moderated",
            comment_id=str(comment_id),
            post_id=post_id,
            status=new_status.value,
            moderator_id=moderator.user_id,
        )
        return comment

    # ==========================================================================
    # Queries
    # ==========================================================================

    async def get_comment(self, comment_id: UUID) -> Comment | None:
        """Fetch a comment whatever its moderation status."""
        post_id = await self.store.post_for_comment(comment_id)
        if post_id is None:
            return None
        aggregate = await self.store.snapshot(post_id)
        return aggregate.comments.get(comment_id)

    async def list_comments(
        self,
        post_id: str,
        parent_id: UUID | None = None,
        sort: CommentSort | str = CommentSort.NEWEST,
    ) -> CommentListing:
        """Approved comments directly under ``parent_id`` (top level when None)."""
        try:
            order = CommentSort(sort)
        except ValueError as e:
            raise ValidationError(f"Unknown sort order: {sort}") from e

        aggregate = await self.store.snapshot(post_id)
        visible = [c for c in aggregate.children_of(parent_id) if c.is_visible]
        return CommentListing(visible, order)
