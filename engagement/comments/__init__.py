"""Threaded comments on posts.

Provides:
- Comments and replies (adjacency list with cached reply counts)
- Moderation workflow
- Cascading deletion

Note: the service and router are not exported here to avoid circular
imports. Import them from engagement.comments.service / .router.
"""

from engagement.comments.models import (
    Comment,
    CommentSort,
    ModerationStatus,
    create_comment,
)


__all__ = [
    "Comment",
    "CommentSort",
    "ModerationStatus",
    "create_comment",
]
