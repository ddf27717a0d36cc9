"""Shared fixtures: a ticking clock, stores, managers and an HTTP client."""

from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta

import fakeredis
import pytest
from fakeredis.aioredis import FakeRedis
from fastapi.testclient import TestClient

from engagement.bootstrap import EngagementServices, build_services
from engagement.config import Settings
from engagement.core.identity import Actor
from engagement.main import create_app
from engagement.store import InMemoryEngagementStore, RedisEngagementStore


class TickingClock:
    """Clock that advances a fixed step on every reading."""

    def __init__(
        self,
        start: datetime = datetime(2024, 1, 1, 12, 0, tzinfo=UTC),
        step: timedelta = timedelta(seconds=1),
    ):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current += self.step
        return now


# ==============================================================================
# Fixtures
# ==============================================================================


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="testing",
        log_requests=False,
        store_backend="memory",
    )


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def store() -> InMemoryEngagementStore:
    return InMemoryEngagementStore(verify_invariants=True)


@pytest.fixture
def redis_server() -> fakeredis.FakeServer:
    return fakeredis.FakeServer()


@pytest.fixture
def fake_redis(redis_server: fakeredis.FakeServer) -> FakeRedis:
    return FakeRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def other_redis(redis_server: fakeredis.FakeServer) -> fakeredis.FakeRedis:
    """Second, synchronous connection to the same server, for concurrent writes."""
    return fakeredis.FakeRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def redis_store(fake_redis: FakeRedis) -> RedisEngagementStore:
    return RedisEngagementStore(fake_redis, key_prefix="test", max_retries=3)


@pytest.fixture
def services(
    store: InMemoryEngagementStore, settings: Settings, clock: TickingClock
) -> EngagementServices:
    return build_services(store, settings, clock=clock)


@pytest.fixture
def alice() -> Actor:
    return Actor(user_id="alice", display_name="Alice", avatar_url="https://a.example/a.png")


@pytest.fixture
def bob() -> Actor:
    return Actor(user_id="bob", display_name="Bob")


@pytest.fixture
def carol() -> Actor:
    return Actor(user_id="carol", display_name="Carol")


@pytest.fixture
def moderator() -> Actor:
    return Actor(user_id="mod", display_name="Moderator")


@pytest.fixture
def client(settings: Settings, services: EngagementServices) -> Iterator[TestClient]:
    app = create_app(settings=settings, services=services)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def headers() -> Callable[[Actor], dict[str, str]]:
    """Identity headers for an actor."""

    def build(actor: Actor) -> dict[str, str]:
        return {"X-User-Id": actor.user_id, "X-User-Name": actor.display_name}

    return build
