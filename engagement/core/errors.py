"""Error hierarchy shared by every engagement manager.

Each error carries a machine-readable ``code`` so the HTTP layer can map it
to a status code without inspecting exception types one by one.
"""


class EngagementError(Exception):
    """Base engagement error."""

    def __init__(self, message: str, code: str = "engagement_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(EngagementError):
    """Malformed input (content, rating, offsets, notification fields)."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, "validation_error")


class NotFoundError(EngagementError):
    """Referenced comment, parent, highlight or notification does not exist."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, "not_found")


class ConflictError(EngagementError):
    """Concurrent write detected by the store; the whole operation may be retried."""

    def __init__(self, message: str = "Concurrent modification, please try again"):
        super().__init__(message, "conflict")


class InvariantViolationError(EngagementError):
    """A mutation would leave the store inconsistent. Never recoverable."""

    def __init__(self, message: str = "Engagement store invariant violated"):
        super().__init__(message, "invariant_violation")
