"""FastAPI dependencies for metrics."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from engagement.metrics.aggregator import MetricsAggregator


async def get_metrics_aggregator(request: Request) -> MetricsAggregator:
    """Get metrics aggregator from app state."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Metrics service not available",
        )
    return services.metrics


MetricsAggregatorDep = Annotated[MetricsAggregator, Depends(get_metrics_aggregator)]
