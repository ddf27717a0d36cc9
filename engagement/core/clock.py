"""Time source used by the managers.

Managers take a ``Clock`` so tests can drive timestamps deterministically.
"""

from collections.abc import Callable
from datetime import UTC, datetime


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)
