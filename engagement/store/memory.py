"""In-process engagement store."""

import asyncio
import copy
from collections import defaultdict
from uuid import UUID

from engagement.core.logging import get_logger
from engagement.store.base import EngagementStore, IndexChanges, Operation, PostAggregate, T


logger = get_logger(__name__)


class InMemoryEngagementStore(EngagementStore):
    """Dict-backed store with one asyncio lock per post.

    Operations are synchronous, so a commit (aggregate swap plus index
    updates) never yields to the event loop halfway through.
    """

    def __init__(self, verify_invariants: bool = True):
        super().__init__(verify_invariants=verify_invariants)
        self._posts: dict[str, PostAggregate] = {}
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._comment_index: dict[UUID, str] = {}
        self._notification_index: dict[UUID, str] = {}
        self._recipient_index: defaultdict[str, set[str]] = defaultdict(set)

    @property
    def backend(self) -> str:
        return "memory"

    async def execute(self, post_id: str, operation: Operation[T]) -> T:
        async with self._locks[post_id]:
            current = self._posts.get(post_id)
            working = current.copy() if current else PostAggregate(post_id=post_id)

            result = operation(working)
            self._verify(working)

            self._posts[post_id] = working
            self._apply_index_changes(post_id, IndexChanges.between(current, working))
            return copy.deepcopy(result)

    async def snapshot(self, post_id: str) -> PostAggregate:
        current = self._posts.get(post_id)
        return current.copy() if current else PostAggregate(post_id=post_id)

    async def post_for_comment(self, comment_id: UUID) -> str | None:
        return self._comment_index.get(comment_id)

    async def post_for_notification(self, notification_id: UUID) -> str | None:
        return self._notification_index.get(notification_id)

    async def posts_for_recipient(self, user_id: str) -> set[str]:
        return set(self._recipient_index.get(user_id, ()))

    def _apply_index_changes(self, post_id: str, changes: IndexChanges) -> None:
        for comment_id in changes.removed_comments:
            self._comment_index.pop(comment_id, None)
        for comment_id in changes.added_comments:
            self._comment_index[comment_id] = post_id
        for notification_id in changes.removed_notifications:
            self._notification_index.pop(notification_id, None)
        for notification_id in changes.added_notifications:
            self._notification_index[notification_id] = post_id
        for user_id in changes.removed_recipients:
            self._recipient_index[user_id].discard(post_id)
        for user_id in changes.added_recipients:
            self._recipient_index[user_id].add(post_id)
