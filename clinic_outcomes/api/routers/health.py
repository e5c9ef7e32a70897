"""
Health endpoint for operational visibility.

- /health: Liveness check, also reports the chart lifecycle state
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from clinic_outcomes import __version__
from clinic_outcomes.core.dependencies import get_lifecycle_manager
from clinic_outcomes.services.charts import ChartLifecycleManager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health & Observability"])


class HealthResponse(BaseModel):
    """Response model for /health endpoint."""
    status: str  # "healthy"
    version: str
    timestamp: str  # ISO 8601 UTC
    lifecycle_state: str
    live_charts: int


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check",
    description="Check if the application is running. Returns immediately without fetching data."
)
async def health_check(
    manager: ChartLifecycleManager = Depends(get_lifecycle_manager)
) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        lifecycle_state=manager.state.value,
        live_charts=manager.live_count,
    )
