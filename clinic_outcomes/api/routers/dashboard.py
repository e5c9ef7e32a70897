"""
Dashboard router - page, period selection, overlay labels and export.

Architecture:
    HTTP Request → Router (this file) → DashboardService → DataProvider / ChartLifecycleManager

Dependency Injection:
    DashboardService and MetricsDataProvider are injected via Depends().
    The DI chain is defined in core/dependencies.py.
"""
import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response
from fastapi.responses import HTMLResponse

from clinic_outcomes.core.dependencies import get_dashboard_service, get_data_provider
from clinic_outcomes.schemas import (
    DashboardLabelsResponse,
    DashboardStateResponse,
    LabelSpecResponse,
    MetricsSnapshot,
    PeriodSelection,
    PointResponse,
)
from clinic_outcomes.services.dashboard_service import DashboardService
from clinic_outcomes.services.data_provider import MetricsDataProvider
from clinic_outcomes.services.layout import LabelSpec

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Dashboard"])


def _label_response(spec: LabelSpec) -> LabelSpecResponse:
    return LabelSpecResponse(
        text=spec.text,
        anchor=PointResponse(x=spec.anchor.x, y=spec.anchor.y),
        connector=[PointResponse(x=p.x, y=p.y) for p in spec.connector],
        align=spec.align,
        mask_radius=spec.mask_radius,
    )


def _state_response(dashboard: DashboardService) -> DashboardStateResponse:
    manager = dashboard.lifecycle
    return DashboardStateResponse(
        state=manager.state.value,
        period=dashboard.current_period,
        live_charts=[h.surface_id for h in manager.handles],
        snapshot=dashboard.snapshot,
    )


# =============================================================================
# PAGE
# =============================================================================

@router.get(
    "/",
    response_class=HTMLResponse,
    summary="Clinic outcomes dashboard",
    description="Render the dashboard page with every live chart. Loads the default period on first visit."
)
async def dashboard_page(
    period: Optional[int] = Query(None, description="Reporting period in days", examples=[60]),
    tooltip: bool = Query(False, description="Show the info box and chart hover tooltips"),
    dashboard: DashboardService = Depends(get_dashboard_service)
):
    """
    Dashboard page.

    Query Parameters:
    - **period**: Switch to this reporting period before rendering (optional)
    - **tooltip**: Show hover tooltips and the explanation box (default false)
    """
    await dashboard.ensure_loaded(period)
    return HTMLResponse(content=dashboard.render_html(show_tooltip=tooltip))


# =============================================================================
# API
# =============================================================================

@router.get(
    "/api/v1/metrics/{period}",
    response_model=MetricsSnapshot,
    summary="Get the metrics snapshot of a period",
    description="Resolve a reporting period to its snapshot. Unknown periods and fetch failures "
                "return a zero-filled snapshot instead of an error."
)
async def get_metrics(
    period: int = Path(..., description="Reporting period in days", examples=[30]),
    provider: MetricsDataProvider = Depends(get_data_provider)
) -> MetricsSnapshot:
    return await provider.resolve(period)


@router.post(
    "/api/v1/dashboard/period",
    response_model=DashboardStateResponse,
    summary="Switch the displayed reporting period",
    description="Load the period's data and rebuild every chart from it."
)
async def select_period(
    selection: PeriodSelection,
    dashboard: DashboardService = Depends(get_dashboard_service)
) -> DashboardStateResponse:
    """
    Switch the reporting period.

    Raises:
    - 409 Conflict: If the chart lifecycle was closed (LifecycleError)
    """
    await dashboard.select_period(selection.period)
    return _state_response(dashboard)


@router.get(
    "/api/v1/dashboard/labels",
    response_model=DashboardLabelsResponse,
    summary="Get the overlay labels of the live charts",
    description="Computed label text, anchors and connector polylines in surface pixels, keyed by surface id."
)
async def get_labels(
    dashboard: DashboardService = Depends(get_dashboard_service)
) -> DashboardLabelsResponse:
    await dashboard.ensure_loaded()
    labels: Dict[str, List[LabelSpecResponse]] = {
        surface_id: [_label_response(spec) for spec in specs]
        for surface_id, specs in dashboard.labels_payload().items()
    }
    return DashboardLabelsResponse(period=dashboard.current_period, labels=labels)


@router.get(
    "/api/v1/dashboard/export",
    summary="Export the dashboard as PNG",
    description="Capture the live charts as a PNG download. Falls back to a plain placeholder image "
                "when chart rendering is unavailable.",
    responses={200: {"content": {"image/png": {}}}, 503: {"description": "Screenshot capture failed"}},
)
async def export_dashboard(
    dashboard: DashboardService = Depends(get_dashboard_service)
) -> Response:
    """
    Export the dashboard.

    Raises:
    - 503 Service Unavailable: If every capture method failed (ExportError)
    """
    await dashboard.ensure_loaded()
    result = await dashboard.export()
    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename}"',
            "X-Export-Method": result.method,
        },
    )
