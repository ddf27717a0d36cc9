"""FastAPI dependencies for the comment API."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from engagement.comments.service import CommentService


async def get_comment_service(request: Request) -> CommentService:
    """Get comment service from app state.

    Raises:
        HTTPException 503: If the services were not initialized
    """
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Comment service not available",
        )
    return services.comments


CommentServiceDep = Annotated[CommentService, Depends(get_comment_service)]
