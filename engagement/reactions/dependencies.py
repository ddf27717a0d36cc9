"""FastAPI dependencies for the reaction API."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from engagement.reactions.service import ReactionService


async def get_reaction_service(request: Request) -> ReactionService:
    """Get reaction service from app state."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Reaction service not available",
        )
    return services.reactions


ReactionServiceDep = Annotated[ReactionService, Depends(get_reaction_service)]
