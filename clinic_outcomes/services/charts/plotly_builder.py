"""
Plotly figure builder for the dashboard charts.

Responsibilities:
- Creating the traces of each chart kind
- Sizing each figure to its surface so the plot area equals the draw area
- Drawing LabelSpecs from the layout engine as annotations and shapes

The layout engine works in canvas pixels; this module is the only place
that knows about Plotly's paper coordinates.
"""

import logging
from typing import Dict, Tuple

import plotly.graph_objects as go

from clinic_outcomes.schemas.metrics import MetricsSnapshot
from clinic_outcomes.services.charts.surfaces import SurfaceSpec
from clinic_outcomes.services.layout import ChartKind, DrawArea, LabelSpec, Point, compute_labels
from clinic_outcomes.services.layout.constants import (
    BAR_PERCENTAGE,
    CATEGORY_PERCENTAGE,
    PIE_RADIUS,
    PIE_ROTATION_DEGREES,
    SCALE_SEGMENT_WIDTHS,
    SCALE_TICKS,
    VERY_HIGH_SENTINEL,
)

logger = logging.getLogger(__name__)

RED = '#f44336'
GREEN = '#8bc34a'
AMBER = '#ffc107'

GMI_BAND_LABELS = ('≤7%', '7-8%', '≥8%')
GMI_BAND_COLORS = (GREEN, AMBER, RED)

# Overlay text style per chart kind: (size, color, bold)
LABEL_FONTS: Dict[ChartKind, Tuple[int, str, bool]] = {
    ChartKind.VERTICAL_STACKED: (12, '#333', True),
    ChartKind.HORIZONTAL_SCALE: (10, '#666', False),
    ChartKind.GMI_PIE: (14, '#333', True),
}

CONNECTOR_COLOR = '#666'
MASK_COLOR = '#ffffff'


class PlotlyBuilder:
    """
    Builder for the five dashboard figures.

    Usage:
        builder = PlotlyBuilder()
        fig, labels = builder.build(ChartKind.GMI_PIE, snapshot, surface)
    """

    def build(
        self, kind: ChartKind, snapshot: MetricsSnapshot, surface: SurfaceSpec
    ) -> Tuple[go.Figure, Tuple[LabelSpec, ...]]:
        """Build the figure for one surface and draw its overlay labels."""
        kind = ChartKind(kind)
        area = surface.draw_area
        fig = self.create_figure()

        if kind is ChartKind.VERTICAL_STACKED:
            self.add_vertical_stacked_traces(fig, snapshot)
        elif kind is ChartKind.HORIZONTAL_SCALE:
            self.add_scale_traces(fig)
        elif kind is ChartKind.HORIZONTAL_BAR:
            self.add_horizontal_bar_traces(fig, snapshot)
        elif kind is ChartKind.GMI_PIE:
            self.add_pie_trace(fig, snapshot, area)
        elif kind is ChartKind.GMI_RANGES:
            self.add_gmi_range_trace(fig, snapshot)
        else:
            raise ValueError(f"Unknown chart kind: {kind}")

        self.apply_layout(fig, kind, surface)

        labels = compute_labels(kind, snapshot, area)
        self.draw_labels(fig, labels, area, LABEL_FONTS.get(kind, (12, '#333', False)))

        logger.debug(
            "Built chart",
            extra={"surface_id": surface.surface_id, "labels": len(labels)}
        )
        return fig, labels

    def create_figure(self) -> go.Figure:
        """Create a new empty Plotly figure."""
        return go.Figure()

    # =========================================================================
    # TRACES
    # =========================================================================

    def add_vertical_stacked_traces(self, fig: go.Figure, snapshot: MetricsSnapshot) -> None:
        """Stacked time-in-range column, with the very-high band on top."""
        tir = snapshot.time_in_range
        segments = (
            ('Below Range', tir.below_range, RED),
            ('In Range', tir.in_range, GREEN),
            ('Above Range', tir.above_range, AMBER),
            ('Very High', VERY_HIGH_SENTINEL, AMBER),
        )
        for name, value, color in segments:
            fig.add_trace(go.Bar(
                x=[''],
                y=[value],
                name=name,
                marker=dict(color=color, line=dict(width=0)),
                width=CATEGORY_PERCENTAGE * BAR_PERCENTAGE,
            ))

    def add_scale_traces(self, fig: go.Figure) -> None:
        """Glucose ruler: one horizontal segment per mg/dL band."""
        colors = (RED, RED, GREEN, AMBER, AMBER)
        bounds = zip(SCALE_TICKS, SCALE_TICKS[1:])
        for (low, high), width, color in zip(bounds, SCALE_SEGMENT_WIDTHS, colors):
            fig.add_trace(go.Bar(
                y=[''],
                x=[width],
                orientation='h',
                name=f"{low}-{high}",
                marker=dict(color=color, line=dict(width=0)),
                width=1.0,
            ))

    def add_horizontal_bar_traces(self, fig: go.Figure, snapshot: MetricsSnapshot) -> None:
        tir = snapshot.time_in_range
        for name, value, color in (
            ('Below', tir.below_range, RED),
            ('In Range', tir.in_range, GREEN),
            ('Above', tir.above_range, AMBER),
        ):
            fig.add_trace(go.Bar(
                y=['Range'],
                x=[value],
                orientation='h',
                name=name,
                marker=dict(color=color, line=dict(width=0)),
            ))

    def add_pie_trace(self, fig: go.Figure, snapshot: MetricsSnapshot, area: DrawArea) -> None:
        """
        GMI distribution pie.

        The pie domain is sized so its radius equals PIE_RADIUS, which is
        the radius the connector lines start from.
        """
        dist = snapshot.gmi.distribution
        half_w = min(PIE_RADIUS / area.width, 0.5) if area.width > 0 else 0.5
        half_h = min(PIE_RADIUS / area.height, 0.5) if area.height > 0 else 0.5
        fig.add_trace(go.Pie(
            labels=list(GMI_BAND_LABELS),
            values=[dist.optimal, dist.suboptimal, dist.poor],
            marker=dict(colors=list(GMI_BAND_COLORS), line=dict(color='#ffffff', width=2)),
            rotation=PIE_ROTATION_DEGREES,
            direction='clockwise',
            sort=False,
            textinfo='none',
            domain=dict(x=[0.5 - half_w, 0.5 + half_w], y=[0.5 - half_h, 0.5 + half_h]),
        ))

    def add_gmi_range_trace(self, fig: go.Figure, snapshot: MetricsSnapshot) -> None:
        dist = snapshot.gmi.distribution
        fig.add_trace(go.Bar(
            x=list(GMI_BAND_LABELS),
            y=[dist.optimal, dist.suboptimal, dist.poor],
            marker=dict(color=list(GMI_BAND_COLORS), line=dict(width=0)),
        ))

    # =========================================================================
    # LAYOUT
    # =========================================================================

    def apply_layout(self, fig: go.Figure, kind: ChartKind, surface: SurfaceSpec) -> None:
        """Size the figure to its surface; margins equal the surface padding."""
        pad = surface.padding
        fig.update_layout(
            width=surface.width,
            height=surface.height,
            autosize=False,
            margin=dict(l=pad.left, r=pad.right, t=pad.top, b=pad.bottom, pad=0),
            showlegend=False,
            paper_bgcolor='rgba(0,0,0,0)',
            plot_bgcolor='rgba(0,0,0,0)',
            barmode='stack',
            hovermode='closest',
        )
        hidden = dict(visible=False, showgrid=False, zeroline=False, fixedrange=True)

        if kind is ChartKind.VERTICAL_STACKED:
            fig.update_xaxes(range=[-0.5, 0.5], **hidden)
            fig.update_yaxes(range=[0, 100], **hidden)
        elif kind is ChartKind.HORIZONTAL_SCALE:
            fig.update_xaxes(range=[0, sum(SCALE_SEGMENT_WIDTHS)], **hidden)
            fig.update_yaxes(range=[-0.5, 0.5], **hidden)
        elif kind is ChartKind.HORIZONTAL_BAR:
            fig.update_xaxes(range=[0, 100], **hidden)
            fig.update_yaxes(**hidden)
        elif kind is ChartKind.GMI_RANGES:
            fig.update_xaxes(showgrid=False, zeroline=False, fixedrange=True)
            fig.update_yaxes(range=[0, 100], **hidden)

    # =========================================================================
    # OVERLAY LABELS
    # =========================================================================

    def draw_labels(
        self,
        fig: go.Figure,
        labels: Tuple[LabelSpec, ...],
        area: DrawArea,
        font: Tuple[int, str, bool],
    ) -> None:
        """
        Draw LabelSpecs: connector path first, then the mask disc, then the text.

        Zero-length connectors are not drawn.
        """
        size, color, bold = font
        for label in labels:
            if len(set(label.connector)) > 1:
                fig.add_shape(
                    type='path',
                    path=self._connector_path(label.connector, area),
                    xref='paper', yref='paper',
                    line=dict(color=CONNECTOR_COLOR, width=1),
                    layer='above',
                )

            ax, ay = self.to_paper(label.anchor, area)
            if label.mask_radius:
                r = label.mask_radius
                fig.add_shape(
                    type='circle',
                    xref='paper', yref='paper',
                    xsizemode='pixel', ysizemode='pixel',
                    xanchor=ax, yanchor=ay,
                    x0=-r, x1=r, y0=-r, y1=r,
                    fillcolor=MASK_COLOR,
                    line=dict(width=0),
                    layer='above',
                )

            fig.add_annotation(
                x=ax, y=ay,
                xref='paper', yref='paper',
                text=f"<b>{label.text}</b>" if bold else label.text,
                showarrow=False,
                xanchor=label.align,
                yanchor='middle',
                font=dict(size=size, color=color, family='Arial'),
            )

    @staticmethod
    def to_paper(point: Point, area: DrawArea) -> Tuple[float, float]:
        """Convert a canvas pixel to Plotly paper coordinates of the draw area."""
        x = (point.x - area.left) / area.width if area.width else 0.0
        y = (area.bottom - point.y) / area.height if area.height else 0.0
        return x, y

    def _connector_path(self, points: Tuple[Point, ...], area: DrawArea) -> str:
        coords = [self.to_paper(p, area) for p in points]
        head, *rest = coords
        return f"M {head[0]},{head[1]}" + "".join(f" L {x},{y}" for x, y in rest)

    # =========================================================================
    # TOOLTIPS
    # =========================================================================

    def set_tooltips(self, fig: go.Figure, enabled: bool) -> None:
        """Turn hover tooltips on or off for every trace of a figure."""
        if enabled:
            fig.update_traces(hoverinfo='all')
        else:
            fig.update_traces(hoverinfo='skip')
