"""
FastAPI dependency injection for the Clinic Outcomes dashboard.

Architecture Flow:
    API Layer (Routers)
         ↓ Depends()
    DashboardService
         ↓ Injected
    MetricsDataProvider / ChartLifecycleManager / ExportService

The dashboard keeps one set of live charts per process, so every dependency
here is a process-wide singleton.

Testing:
    app.dependency_overrides[get_dashboard_service] = lambda: test_dashboard
"""
import logging
from typing import Optional

from clinic_outcomes.core.config import settings
from clinic_outcomes.services.charts import ChartLifecycleManager, PlotlyBuilder, mounted_surfaces
from clinic_outcomes.services.dashboard_service import DashboardService
from clinic_outcomes.services.data_provider import MetricsDataProvider
from clinic_outcomes.services.export_service import ExportService

logger = logging.getLogger(__name__)

_data_provider: Optional[MetricsDataProvider] = None
_lifecycle_manager: Optional[ChartLifecycleManager] = None
_export_service: Optional[ExportService] = None
_dashboard_service: Optional[DashboardService] = None


# =============================================================================
# SERVICE DEPENDENCIES
# =============================================================================

def get_data_provider() -> MetricsDataProvider:
    """
    Get the metrics data provider.

    Returns:
        MetricsDataProvider: Fetches period results from CLINIC_DATA_BASE_URL.
    """
    global _data_provider

    if _data_provider is None:
        _data_provider = MetricsDataProvider(
            base_url=settings.clinic_data_base_url,
            timeout=settings.clinic_fetch_timeout,
        )
    return _data_provider


def get_lifecycle_manager() -> ChartLifecycleManager:
    """
    Get the chart lifecycle manager owning the live charts.

    Only the surfaces listed in CLINIC_SURFACES are treated as mounted.
    """
    global _lifecycle_manager

    if _lifecycle_manager is None:
        logger.info(
            "Initializing chart lifecycle",
            extra={"surfaces": settings.surface_list, "render_delay_ms": settings.clinic_render_delay_ms}
        )
        _lifecycle_manager = ChartLifecycleManager(
            builder=PlotlyBuilder(),
            surface_provider=lambda: mounted_surfaces(settings.surface_list),
            render_delay=settings.render_delay_seconds,
        )
    return _lifecycle_manager


def get_export_service() -> ExportService:
    """Get the PNG export service."""
    global _export_service

    if _export_service is None:
        _export_service = ExportService(
            scale=settings.clinic_export_scale,
            fallback_width=settings.clinic_export_fallback_width,
            fallback_height=settings.clinic_export_fallback_height,
        )
    return _export_service


def get_dashboard_service() -> DashboardService:
    """
    Get the dashboard orchestration service.

    Returns:
        DashboardService: Wired with the provider, lifecycle manager and exporter above.
    """
    global _dashboard_service

    if _dashboard_service is None:
        manager = get_lifecycle_manager()
        _dashboard_service = DashboardService(
            data_provider=get_data_provider(),
            lifecycle_manager=manager,
            export_service=get_export_service(),
            builder=manager.builder,
            default_period=settings.clinic_default_period,
        )
    return _dashboard_service


def reset_dependencies() -> None:
    """
    Drop every singleton (for testing only).

    The live charts of the previous lifecycle manager are destroyed first.
    """
    global _data_provider, _lifecycle_manager, _export_service, _dashboard_service

    if _lifecycle_manager is not None:
        _lifecycle_manager.close()
    _data_provider = None
    _lifecycle_manager = None
    _export_service = None
    _dashboard_service = None
