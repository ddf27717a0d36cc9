from engagement.store.base import EngagementStore, IndexChanges, PostAggregate
from engagement.store.memory import InMemoryEngagementStore
from engagement.store.redis_store import RedisEngagementStore


__all__ = [
    "EngagementStore",
    "InMemoryEngagementStore",
    "IndexChanges",
    "PostAggregate",
    "RedisEngagementStore",
]
