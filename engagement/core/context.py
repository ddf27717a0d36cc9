"""Request context management using contextvars.

Each request gets a unique ID plus the acting user and the post being worked
on, so every log line emitted further down the call stack can be correlated
without threading those values through every function.
"""

from contextvars import ContextVar
from typing import Any
from uuid import uuid4


request_id_var: ContextVar[str] = ContextVar("request_id", default="")
actor_id_var: ContextVar[str | None] = ContextVar("actor_id", default=None)
post_id_var: ContextVar[str | None] = ContextVar("post_id", default=None)


def generate_request_id() -> str:
    """Generate a new unique request ID."""
    return str(uuid4())


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set the request ID for the current context.

    Args:
        request_id: Optional request ID. If not provided, generates a new one.

    Returns:
        The request ID that was set.
    """
    rid = request_id or generate_request_id()
    request_id_var.set(rid)
    return rid


def get_actor_id() -> str | None:
    """Get the acting user's ID."""
    return actor_id_var.get()


def set_actor_id(actor_id: str | None) -> None:
    """Set the acting user's ID for the current context."""
    actor_id_var.set(actor_id)


def get_post_id() -> str | None:
    """Get the post the current request operates on."""
    return post_id_var.get()


def set_post_id(post_id: str | None) -> None:
    """Set the post ID for the current context."""
    post_id_var.set(post_id)


def get_context() -> dict[str, Any]:
    """Get all non-empty context variables as a dictionary."""
    context: dict[str, Any] = {}

    request_id = get_request_id()
    if request_id:
        context["request_id"] = request_id

    actor_id = get_actor_id()
    if actor_id:
        context["actor_id"] = actor_id

    post_id = get_post_id()
    if post_id:
        context["post_id"] = post_id

    return context


def clear_context() -> None:
    """Reset all context variables at the end of a request."""
    request_id_var.set("")
    actor_id_var.set(None)
    post_id_var.set(None)

