# Core infrastructure
from engagement.core.clock import Clock, utc_now
from engagement.core.context import (
    clear_context,
    get_actor_id,
    get_context,
    get_post_id,
    get_request_id,
    set_actor_id,
    set_post_id,
    set_request_id,
)
from engagement.core.errors import (
    ConflictError,
    EngagementError,
    InvariantViolationError,
    NotFoundError,
    ValidationError,
)
from engagement.core.identity import Actor
from engagement.core.logging import configure_structlog, get_logger


__all__ = [
    "Actor",
    "Clock",
    "ConflictError",
    "EngagementError",
    "InvariantViolationError",
    "NotFoundError",
    "ValidationError",
    "clear_context",
    "configure_structlog",
    "get_actor_id",
    "get_context",
    "get_logger",
    "get_post_id",
    "get_request_id",
    "set_actor_id",
    "set_post_id",
    "set_request_id",
    "utc_now",
]
