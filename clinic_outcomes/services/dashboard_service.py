"""
Service layer for the clinic outcomes dashboard.

Orchestrates a period selection end to end:
    select_period → MetricsDataProvider.resolve → ChartLifecycleManager.render

and turns the live charts into the dashboard page, the overlay-label payload
and the PNG export.
"""

import html
import logging
from typing import Dict, List, Optional

import plotly.graph_objects as go
import plotly.io as pio
from starlette.concurrency import run_in_threadpool

from clinic_outcomes.schemas.metrics import MetricsSnapshot, ReportingPeriod
from clinic_outcomes.services.charts import ChartLifecycleManager, PlotlyBuilder
from clinic_outcomes.services.data_provider import MetricsDataProvider
from clinic_outcomes.services.export_service import ExportResult, ExportService
from clinic_outcomes.services.layout import LabelSpec

logger = logging.getLogger(__name__)

PAGE_TITLE = "Clinic Outcomes"

TOOLTIP_TEXT = (
    "Time in Range is the share of glucose readings below, within and above the "
    "70-180 mg/dL target band. GMI (Glucose Management Indicator) estimates A1C "
    "from mean glucose; patients are grouped into ≤7%, 7-8% and ≥8%."
)

PAGE_CSS = """
<style>
    body { font-family: Arial, sans-serif; color: #333; margin: 24px; background: #fff; }
    header { display: flex; flex-wrap: wrap; align-items: baseline; gap: 16px; }
    header h1 { font-size: 22px; margin: 0; }
    .meta { color: #666; font-size: 13px; }
    nav a { margin-right: 8px; padding: 4px 10px; border: 1px solid #ccc; border-radius: 4px;
            text-decoration: none; color: #333; }
    nav a.active { background: #8bc34a; color: #fff; border-color: #8bc34a; }
    .tooltip { background: #f5f5f5; border-left: 3px solid #8bc34a; padding: 8px 12px;
               font-size: 13px; max-width: 640px; }
    .charts { display: flex; flex-wrap: wrap; gap: 24px; margin-top: 16px; }
    .chart { display: inline-block; }
    @media print { nav, .actions { display: none; } }
</style>
"""


class DashboardService:
    """
    Public orchestration layer of the dashboard.

    Holds the currently displayed period and snapshot; the live charts are
    owned by the injected ChartLifecycleManager.
    """

    def __init__(
        self,
        data_provider: MetricsDataProvider,
        lifecycle_manager: Optional[ChartLifecycleManager] = None,
        export_service: Optional[ExportService] = None,
        builder: Optional[PlotlyBuilder] = None,
        default_period: int = ReportingPeriod.THIRTY_DAYS,
    ):
        self._provider = data_provider
        self._manager = lifecycle_manager or ChartLifecycleManager(builder=builder)
        self._builder = builder or self._manager.builder
        self._export = export_service or ExportService()
        self.default_period = int(default_period)
        self.current_period: Optional[int] = None
        self.snapshot: Optional[MetricsSnapshot] = None

    @property
    def lifecycle(self) -> ChartLifecycleManager:
        return self._manager

    @property
    def builder(self) -> PlotlyBuilder:
        return self._builder

    async def select_period(self, period: int) -> MetricsSnapshot:
        """Load a period's data and rebuild every chart from it."""
        logger.info("Selected reporting period", extra={"period": period})
        snapshot = await self._provider.resolve(period)
        await self._manager.render(snapshot)
        self.current_period = period
        self.snapshot = snapshot
        return snapshot

    async def ensure_loaded(self, period: Optional[int] = None) -> MetricsSnapshot:
        """
        Make sure the requested (or default) period is displayed.

        Loads on first use, switches when a different period is asked for,
        and otherwise keeps the live charts.
        """
        target = self.default_period if period is None and self.current_period is None else period
        if target is not None and (target != self.current_period or self.snapshot is None):
            return await self.select_period(target)
        return self.snapshot

    def labels_payload(self) -> Dict[str, List[LabelSpec]]:
        """Overlay labels of every live chart, keyed by surface id."""
        return {handle.surface_id: list(handle.labels) for handle in self._manager.handles}

    async def export(self) -> ExportResult:
        """
        Capture the live charts as a PNG.

        The figures are collected on the event loop; rasterizing them starts
        a headless browser, so the capture itself runs in the threadpool.
        """
        figures = [handle.figure for handle in self._manager.handles]
        return await run_in_threadpool(self._export.capture, figures)

    # =========================================================================
    # PAGE
    # =========================================================================

    def render_html(self, show_tooltip: bool = False) -> str:
        """Generate the complete dashboard page with every live chart embedded."""
        snapshot = self.snapshot
        charts = []
        include_js = 'cdn'
        for handle in self._manager.handles:
            fig = go.Figure(handle.figure)
            self._builder.set_tooltips(fig, show_tooltip)
            charts.append(
                f'<div class="chart" id="{handle.surface_id}">'
                + pio.to_html(
                    fig,
                    full_html=False,
                    include_plotlyjs=include_js,
                    config={'displayModeBar': False, 'responsive': False},
                    div_id=f"{handle.surface_id}-plot",
                )
                + '</div>'
            )
            include_js = False

        return (
            "<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\">"
            f"<title>{PAGE_TITLE}</title>{PAGE_CSS}</head><body>"
            f"{self._render_header(snapshot, show_tooltip)}"
            f"<section class=\"charts\">{''.join(charts)}</section>"
            "</body></html>"
        )

    def _render_header(self, snapshot: Optional[MetricsSnapshot], show_tooltip: bool) -> str:
        periods = []
        for period in ReportingPeriod:
            active = ' class="active"' if period.value == self.current_period else ''
            tooltip = '&tooltip=true' if show_tooltip else ''
            periods.append(f'<a href="/?period={period.value}{tooltip}"{active}>{period.label}</a>')

        toggle_href = f"/?period={self.current_period or self.default_period}"
        if not show_tooltip:
            toggle_href += "&tooltip=true"

        meta = ""
        if snapshot is not None:
            meta = (
                f'<div class="meta">Reporting period: {html.escape(snapshot.reporting_period)}'
                f' &middot; {html.escape(snapshot.date_range)}'
                f' &middot; Last updated: {html.escape(snapshot.last_updated)}</div>'
                f'<div class="meta">Patients: {snapshot.patient_count}'
                f' &middot; Average GMI: {snapshot.gmi.average:g}%</div>'
            )

        tooltip_box = f'<p class="tooltip">{html.escape(TOOLTIP_TEXT)}</p>' if show_tooltip else ''

        return (
            f"<header><h1>{PAGE_TITLE}</h1>{meta}</header>"
            f"<nav>{''.join(periods)}</nav>"
            '<div class="actions">'
            '<a href="/api/v1/dashboard/export" download>Export PNG</a> '
            f'<a href="{toggle_href}">{"Hide" if show_tooltip else "Show"} info</a>'
            "</div>"
            f"{tooltip_box}"
        )
