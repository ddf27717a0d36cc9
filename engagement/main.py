"""Post Engagement API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from engagement.bootstrap import EngagementServices, build_services, build_store
from engagement.comments.router import router as comments_router
from engagement.config import Settings, get_settings
from engagement.core.context import get_request_id
from engagement.core.errors import EngagementError
from engagement.core.logging import configure_structlog, get_logger
from engagement.core.middleware import RequestContextMiddleware
from engagement.core.redis import init_redis, shutdown_redis
from engagement.health.router import router as health_router
from engagement.highlights.router import router as highlights_router
from engagement.metrics.router import router as metrics_router
from engagement.notifications.router import router as notifications_router
from engagement.reactions.router import router as reactions_router


logger = get_logger(__name__)

ERROR_STATUS = {
    "validation_error": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "not_found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_409_CONFLICT,
    "invariant_violation": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Services preset on ``app.state`` (tests) are used as they are.
    """
    settings: Settings = app.state.settings
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        store_backend=settings.store_backend,
    )

    owns_services = getattr(app.state, "services", None) is None
    if owns_services:
        redis_client = None
        if settings.store_backend == "redis":
            redis_client = await init_redis(settings)
        app.state.services = build_services(build_store(settings, redis_client), settings)

    yield

    logger.info("shutting_down_application")
    if owns_services:
        app.state.services = None
        await shutdown_redis()


def create_app(
    settings: Settings | None = None,
    services: EngagementServices | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    configure_structlog(settings)

    # Always debug=False so Starlette never renders stack traces in responses.
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Comments, reactions, highlights, ratings and engagement metrics for posts",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )
    app.state.settings = settings
    app.state.services = services

    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    def _get_request_id_safe(request: Request) -> str | None:
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return get_request_id() or None

    @app.exception_handler(EngagementError)
    async def engagement_exception_handler(
        request: Request, exc: EngagementError
    ) -> ORJSONResponse:
        """Map engagement errors onto HTTP status codes."""
        status_code = ERROR_STATUS.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "engagement_error",
                code=exc.code,
                error_message=exc.message,
                path=request.url.path,
                method=request.method,
            )
            message = "Internal server error"
        else:
            logger.warning(
                "engagement_error",
                code=exc.code,
                error_message=exc.message,
                path=request.url.path,
                method=request.method,
            )
            message = exc.message

        return ORJSONResponse(
            status_code=status_code,
            content={
                "error": True,
                "code": exc.code,
                "message": message,
                "status_code": status_code,
                "request_id": _get_request_id_safe(request),
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions with safe error messages."""
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )
        return ORJSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "code": "http_error",
                "message": str(exc.detail)
                if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
                else "Internal server error",
                "status_code": exc.status_code,
                "request_id": _get_request_id_safe(request),
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Handle request validation errors."""
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )
        return ORJSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": True,
                "code": "validation_error",
                "message": "Validation error",
                "status_code": 422,
                "request_id": _get_request_id_safe(request),
                "details": [
                    {
                        "field": ".".join(str(loc) for loc in err.get("loc", [])),
                        "message": err.get("msg", "Invalid value"),
                    }
                    for err in exc.errors()
                ],
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler. Details are logged, never returned."""
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )
        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": True,
                "code": "internal_error",
                "message": "An unexpected error occurred. Please try again later.",
                "status_code": 500,
                "request_id": _get_request_id_safe(request),
            },
        )

    app.include_router(health_router)
    app.include_router(comments_router)
    app.include_router(reactions_router)
    app.include_router(highlights_router)
    app.include_router(notifications_router)
    app.include_router(metrics_router)

    return app


app = create_app()
