"""Health check endpoints."""

from fastapi import APIRouter, Request

from engagement.config.dependencies import AppSettings


router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - checks if the application is running."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request, settings: AppSettings) -> dict[str, str | bool]:
    """Readiness probe - checks that the engagement store is wired up."""
    services = getattr(request.app.state, "services", None)
    return {
        "status": "ready" if services is not None else "starting",
        "store_backend": services.store.backend if services is not None else "none",
        "environment": settings.environment,
        "debug": settings.debug,
    }


@router.get("")
async def health(settings: AppSettings) -> dict[str, str]:
    """General health check endpoint."""
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }
