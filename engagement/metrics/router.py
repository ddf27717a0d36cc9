"""Engagement metrics API endpoints."""

from fastapi import APIRouter, Response, status

from engagement.core.context import set_post_id
from engagement.core.identity import CurrentActor
from engagement.metrics.dependencies import MetricsAggregatorDep
from engagement.metrics.schemas import (
    EngagementMetricsResponse,
    RecordShareRequest,
    RecordViewRequest,
)


router = APIRouter(prefix="/v1/posts/{post_id}", tags=["metrics"])


@router.get(
    "/metrics",
    response_model=EngagementMetricsResponse,
    summary="Get post metrics",
)
async def get_metrics(
    post_id: str,
    aggregator: MetricsAggregatorDep,
) -> EngagementMetricsResponse:
    """Cached metrics; a post without activity reports zeros."""
    metrics = await aggregator.get(post_id)
    return EngagementMetricsResponse.from_metrics(metrics)


@router.post(
    "/metrics/refresh",
    response_model=EngagementMetricsResponse,
    summary="Recompute post metrics",
)
async def refresh_metrics(
    post_id: str,
    aggregator: MetricsAggregatorDep,
) -> EngagementMetricsResponse:
    set_post_id(post_id)
    metrics = await aggregator.refresh(post_id)
    return EngagementMetricsResponse.from_metrics(metrics)


@router.post(
    "/views",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Record post view",
)
async def record_view(
    post_id: str,
    aggregator: MetricsAggregatorDep,
    actor: CurrentActor,
    data: RecordViewRequest | None = None,
) -> Response:
    set_post_id(post_id)
    await aggregator.record_view(
        post_id, actor.user_id, duration=data.duration if data else None
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/shares",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Record post share",
)
async def record_share(
    post_id: str,
    data: RecordShareRequest,
    aggregator: MetricsAggregatorDep,
    actor: CurrentActor,
) -> Response:
    set_post_id(post_id)
    await aggregator.record_share(post_id, actor.user_id, data.platform)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
