"""Engagement store contract and the per-post aggregate it persists.

Every record belonging to a post (comments with their reactions, post
reactions, highlights, feedback, notifications, the engagement log and the
cached metrics row) lives in one ``PostAggregate``. Mutations are plain
synchronous functions applied through ``EngagementStore.execute``, which runs
them on a private copy and commits the copy only if they return normally.
"""

import copy
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar
from uuid import UUID

from engagement.comments.models import Comment
from engagement.core.errors import InvariantViolationError
from engagement.highlights.models import MAX_RATING, MIN_RATING, ContentFeedback, Highlight
from engagement.metrics.compute import compute_metrics
from engagement.metrics.models import EngagementMetrics, EngagementType, UserEngagement
from engagement.notifications.models import CommentNotification
from engagement.reactions.models import CommentTarget, PostTarget, Reaction


T = TypeVar("T")

Operation = Callable[["PostAggregate"], T]


@dataclass
class PostAggregate:
    """All engagement records for a single post."""

    post_id: str
    comments: dict[UUID, Comment] = field(default_factory=dict)
    post_reactions: dict[str, Reaction] = field(default_factory=dict)
    highlights: dict[UUID, Highlight] = field(default_factory=dict)
    feedback: dict[str, ContentFeedback] = field(default_factory=dict)
    notifications: dict[UUID, CommentNotification] = field(default_factory=dict)
    engagement_log: list[UserEngagement] = field(default_factory=list)
    metrics: EngagementMetrics = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.metrics is None:
            self.metrics = EngagementMetrics(post_id=self.post_id)

    # ==========================================================================
    # Queries
    # ==========================================================================

    def children_of(self, parent_id: UUID | None) -> list[Comment]:
        return [c for c in self.comments.values() if c.parent_id == parent_id]

    def has_viewed(self, user_id: str) -> bool:
        return any(
            entry.user_id == user_id and entry.engagement_type == EngagementType.VIEW
            for entry in self.engagement_log
        )

    def recipients(self) -> set[str]:
        return {n.user_id for n in self.notifications.values()}

    def copy(self) -> "PostAggregate":
        return copy.deepcopy(self)

    # ==========================================================================
    # Integrity
    # ==========================================================================

    def check_integrity(self) -> None:
        """Raise InvariantViolationError if the aggregate is inconsistent."""
        problems = list(self._integrity_problems())
        if problems:
            raise InvariantViolationError(
                f"Post {self.post_id} is inconsistent: {'; '.join(problems)}"
            )

    def _integrity_problems(self):  # noqa: C901
        child_counts: dict[UUID, int] = defaultdict(int)

        for comment_id, comment in self.comments.items():
            if comment.comment_id != comment_id:
                yield f"comment {comment_id} stored under the wrong key"
            if comment.post_id != self.post_id:
                yield f"comment {comment_id} belongs to post {comment.post_id}"
            if comment.parent_id is not None:
                if comment.parent_id not in self.comments:
                    yield f"comment {comment_id} has missing parent {comment.parent_id}"
                child_counts[comment.parent_id] += 1
            for user_id, reaction in comment.reactions.items():
                if reaction.user_id != user_id:
                    yield f"reaction on comment {comment_id} keyed by wrong user"
                if reaction.target != CommentTarget(comment_id):
                    yield f"reaction {reaction.reaction_id} targets the wrong comment"

        for comment_id, comment in self.comments.items():
            if comment.reply_count != child_counts.get(comment_id, 0):
                yield (
                    f"comment {comment_id} reply_count {comment.reply_count} "
                    f"!= {child_counts.get(comment_id, 0)} replies"
                )

        for user_id, reaction in self.post_reactions.items():
            if reaction.user_id != user_id:
                yield "post reaction keyed by wrong user"
            if reaction.target != PostTarget(self.post_id):
                yield f"reaction {reaction.reaction_id} targets the wrong post"

        for highlight in self.highlights.values():
            if not 0 <= highlight.start_offset < highlight.end_offset:
                yield f"highlight {highlight.highlight_id} has invalid offsets"
            if highlight.comment_id is None:
                continue
            linked = self.comments.get(highlight.comment_id)
            if linked is None:
                yield f"highlight {highlight.highlight_id} points at a deleted comment"
            elif linked.highlight_id != highlight.highlight_id:
                yield f"highlight {highlight.highlight_id} linked to an unrelated comment"

        for user_id, feedback in self.feedback.items():
            if feedback.user_id != user_id:
                yield "feedback keyed by wrong user"
            if not MIN_RATING <= feedback.rating <= MAX_RATING:
                yield f"feedback {feedback.feedback_id} rating out of range"

        if self.metrics.counters() != compute_metrics(self).counters():
            yield "cached metrics differ from recomputed metrics"

    # ==========================================================================
    # Serialization
    # ==========================================================================

    def to_dict(self) -> dict[str, Any]:
        return {
            "post_id": self.post_id,
            "comments": [c.to_dict() for c in self.comments.values()],
            "post_reactions": [r.to_dict() for r in self.post_reactions.values()],
            "highlights": [h.to_dict() for h in self.highlights.values()],
            "feedback": [f.to_dict() for f in self.feedback.values()],
            "notifications": [n.to_dict() for n in self.notifications.values()],
            "engagement_log": [e.to_dict() for e in self.engagement_log],
            "metrics": self.metrics.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PostAggregate":
        comments = [Comment.from_dict(item) for item in data.get("comments", [])]
        reactions = [Reaction.from_dict(item) for item in data.get("post_reactions", [])]
        highlights = [Highlight.from_dict(item) for item in data.get("highlights", [])]
        feedback = [ContentFeedback.from_dict(item) for item in data.get("feedback", [])]
        notifications = [
            CommentNotification.from_dict(item) for item in data.get("notifications", [])
        ]
        return cls(
            post_id=data["post_id"],
            comments={c.comment_id: c for c in comments},
            post_reactions={r.user_id: r for r in reactions},
            highlights={h.highlight_id: h for h in highlights},
            feedback={f.user_id: f for f in feedback},
            notifications={n.notification_id: n for n in notifications},
            engagement_log=[
                UserEngagement.from_dict(item) for item in data.get("engagement_log", [])
            ],
            metrics=(
                EngagementMetrics.from_dict(data["metrics"])
                if data.get("metrics")
                else None
            ),
        )


@dataclass(frozen=True)
class IndexChanges:
    """Secondary index entries to add and drop when committing a post."""

    added_comments: frozenset[UUID]
    removed_comments: frozenset[UUID]
    added_notifications: frozenset[UUID]
    removed_notifications: frozenset[UUID]
    added_recipients: frozenset[str]
    removed_recipients: frozenset[str]

    @classmethod
    def between(
        cls, before: PostAggregate | None, after: PostAggregate
    ) -> "IndexChanges":
        old_comments = set(before.comments) if before else set()
        old_notifications = set(before.notifications) if before else set()
        old_recipients = before.recipients() if before else set()
        new_comments = set(after.comments)
        new_notifications = set(after.notifications)
        new_recipients = after.recipients()
        return cls(
            added_comments=frozenset(new_comments - old_comments),
            removed_comments=frozenset(old_comments - new_comments),
            added_notifications=frozenset(new_notifications - old_notifications),
            removed_notifications=frozenset(old_notifications - new_notifications),
            added_recipients=frozenset(new_recipients - old_recipients),
            removed_recipients=frozenset(old_recipients - new_recipients),
        )


class EngagementStore(ABC):
    """Transactional home of every post aggregate.

    Implementations serialize ``execute`` per post and keep the comment,
    notification and recipient indexes in step with each commit.
    """

    def __init__(self, verify_invariants: bool = True):
        self.verify_invariants = verify_invariants

    @abstractmethod
    async def execute(self, post_id: str, operation: Operation[T]) -> T:
        """Apply ``operation`` to the post atomically and return its result.

        The operation receives a working copy (an empty aggregate for a post
        with no records yet). If it raises, nothing is committed.
        """

    @abstractmethod
    async def snapshot(self, post_id: str) -> PostAggregate:
        """Detached copy of the post's current records."""

    @abstractmethod
    async def post_for_comment(self, comment_id: UUID) -> str | None:
        """Post owning the comment, if the comment exists."""

    @abstractmethod
    async def post_for_notification(self, notification_id: UUID) -> str | None:
        """Post owning the notification, if it exists."""

    @abstractmethod
    async def posts_for_recipient(self, user_id: str) -> set[str]:
        """Posts holding at least one notification for the user."""

    async def close(self) -> None:
        """Release backend resources."""
        return None

    @property
    @abstractmethod
    def backend(self) -> str:
        """Backend name reported by health checks."""

    def _verify(self, aggregate: PostAggregate) -> None:
        if self.verify_invariants:
            aggregate.check_integrity()
