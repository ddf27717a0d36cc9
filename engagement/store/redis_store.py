"""Redis-backed engagement store.

Key layout (``{prefix}`` defaults to ``engagement``):
- ``{prefix}:post:{post_id}``: JSON document holding the post aggregate
- ``{prefix}:index:comments``: hash comment_id -> post_id
- ``{prefix}:index:notifications``: hash notification_id -> post_id
- ``{prefix}:recipient:{user_id}``: set of post ids with notifications for the user

Writes use optimistic concurrency: the post key is WATCHed, the operation
runs on the decoded document, and the new document plus index changes are
written in one MULTI/EXEC. A concurrent write to the same post aborts the
EXEC with WatchError and the operation is re-run on fresh data.
"""

from typing import Any
from uuid import UUID

import orjson
import redis.asyncio as redis
from redis.exceptions import WatchError

from engagement.core.errors import ConflictError
from engagement.core.logging import get_logger
from engagement.store.base import EngagementStore, IndexChanges, Operation, PostAggregate, T


logger = get_logger(__name__)


def _decode(value: Any) -> str:
    return value.decode() if isinstance(value, bytes) else value


class RedisEngagementStore(EngagementStore):
    """Engagement store persisting one JSON document per post."""

    def __init__(
        self,
        client: redis.Redis,
        key_prefix: str = "engagement",
        max_retries: int = 3,
        verify_invariants: bool = True,
    ):
        super().__init__(verify_invariants=verify_invariants)
        self.client = client
        self.key_prefix = key_prefix
        self.max_retries = max_retries

    @property
    def backend(self) -> str:
        return "redis"

    # ==========================================================================
    # Keys
    # ==========================================================================

    def post_key(self, post_id: str) -> str:
        return f"{self.key_prefix}:post:{post_id}"

    @property
    def comment_index_key(self) -> str:
        return f"{self.key_prefix}:index:comments"

    @property
    def notification_index_key(self) -> str:
        return f"{self.key_prefix}:index:notifications"

    def recipient_key(self, user_id: str) -> str:
        return f"{self.key_prefix}:recipient:{user_id}"

    # ==========================================================================
    # Transactions
    # ==========================================================================

    async def execute(self, post_id: str, operation: Operation[T]) -> T:
        key = self.post_key(post_id)

        for attempt in range(1, self.max_retries + 1):
            async with self.client.pipeline(transaction=True) as pipe:
                try:
                    await pipe.watch(key)
                    current = self._load(post_id, await pipe.get(key))
                    working = current.copy() if current else PostAggregate(post_id=post_id)

                    result = operation(working)
                    self._verify(working)

                    pipe.multi()
                    pipe.set(key, orjson.dumps(working.to_dict()))
                    self._queue_index_changes(
                        pipe, post_id, IndexChanges.between(current, working)
                    )
                    await pipe.execute()
                    return result
                except WatchError:
                    logger.info(
                        "store_write_conflict",
                        post_id=post_id,
                        attempt=attempt,
                        max_retries=self.max_retries,
                    )

        logger.warning("store_write_conflict_exhausted", post_id=post_id)
        raise ConflictError(
            f"Post {post_id} was modified concurrently, please try again"
        )

    async def snapshot(self, post_id: str) -> PostAggregate:
        current = self._load(post_id, await self.client.get(self.post_key(post_id)))
        return current or PostAggregate(post_id=post_id)

    async def post_for_comment(self, comment_id: UUID) -> str | None:
        value = await self.client.hget(self.comment_index_key, str(comment_id))
        return _decode(value) if value is not None else None

    async def post_for_notification(self, notification_id: UUID) -> str | None:
        value = await self.client.hget(self.notification_index_key, str(notification_id))
        return _decode(value) if value is not None else None

    async def posts_for_recipient(self, user_id: str) -> set[str]:
        members = await self.client.smembers(self.recipient_key(user_id))
        return {_decode(member) for member in members}

    async def close(self) -> None:
        await self.client.aclose()

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def _load(self, post_id: str, raw: Any) -> PostAggregate | None:
        if raw is None:
            return None
        return PostAggregate.from_dict(orjson.loads(raw))

    def _queue_index_changes(
        self, pipe: Any, post_id: str, changes: IndexChanges
    ) -> None:
        if changes.removed_comments:
            pipe.hdel(self.comment_index_key, *(str(c) for c in changes.removed_comments))
        if changes.added_comments:
            pipe.hset(
                self.comment_index_key,
                mapping={str(c): post_id for c in changes.added_comments},
            )
        if changes.removed_notifications:
            pipe.hdel(
                self.notification_index_key,
                *(str(n) for n in changes.removed_notifications),
            )
        if changes.added_notifications:
            pipe.hset(
                self.notification_index_key,
                mapping={str(n): post_id for n in changes.added_notifications},
            )
        for user_id in changes.removed_recipients:
            pipe.srem(self.recipient_key(user_id), post_id)
        for user_id in changes.added_recipients:
            pipe.sadd(self.recipient_key(user_id), post_id)
