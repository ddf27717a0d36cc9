"""FastAPI dependencies for the highlight API."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from engagement.highlights.service import HighlightService


async def get_highlight_service(request: Request) -> HighlightService:
    """Get highlight service from app state."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Highlight service not available",
        )
    return services.highlights


HighlightServiceDep = Annotated[HighlightService, Depends(get_highlight_service)]
