"""Acting-user identity.

The identity provider is external: callers hand us a user id, display name
and avatar for every action and we trust them as given. Over HTTP those
arrive as ``X-User-*`` headers.
"""

from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import Depends, Header, HTTPException, status

from engagement.core.context import set_actor_id


@dataclass(frozen=True)
class Actor:
    """The user performing an action (or authoring a comment)."""

    user_id: str
    display_name: str
    avatar_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "display_name": self.display_name,
            "avatar_url": self.avatar_url,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Actor":
        return cls(
            user_id=data["user_id"],
            display_name=data["display_name"],
            avatar_url=data.get("avatar_url"),
        )


async def get_current_actor(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_name: Annotated[str | None, Header()] = None,
    x_user_avatar: Annotated[str | None, Header()] = None,
) -> Actor:
    """Build the acting user from identity headers.

    Raises:
        HTTPException 401: If no user id header was supplied
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )

    user_id = x_user_id.strip()
    set_actor_id(user_id)
    return Actor(
        user_id=user_id,
        display_name=(x_user_name or "").strip() or user_id,
        avatar_url=x_user_avatar or None,
    )


CurrentActor = Annotated[Actor, Depends(get_current_actor)]
