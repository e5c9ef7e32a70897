"""
Label layout engine for the dashboard charts.

Each chart kind has one pure layout function mapping a slice of the metrics
snapshot plus the chart's draw area to an ordered tuple of LabelSpecs:

- vertical_stack_labels: time-in-range stacked bar, labels right of each segment
- scale_ruler_labels: static glucose ruler ticks with divider lines
- horizontal_bar_labels: no overlay
- pie_labels: GMI pie, fixed external anchors with elbow connectors
- gmi_bar_labels: no overlay

The functions keep no state and never mutate their inputs, so identical
inputs always give equal outputs and they are safe to call on every redraw.
"""

import math
from enum import Enum
from typing import Callable, Dict, Tuple

from clinic_outcomes.schemas.metrics import GmiDistribution, MetricsSnapshot, TimeInRange
from clinic_outcomes.services.layout.constants import (
    BAR_PERCENTAGE,
    CATEGORY_PERCENTAGE,
    PIE_ELBOW_EXTENSION,
    PIE_LABEL_MASK_RADIUS,
    PIE_LABEL_OFFSETS,
    PIE_RADIUS,
    PIE_ROTATION_DEGREES,
    SCALE_DIVIDERS_AFTER,
    SCALE_LABEL_OFFSET,
    SCALE_SEGMENT_WIDTHS,
    SCALE_TICKS,
    SEGMENT_LABEL_MARGIN,
    VERY_HIGH_PIN_OFFSET,
    VERY_HIGH_SENTINEL,
)
from clinic_outcomes.services.layout.geometry import DrawArea, LabelSpec, Point, format_percent

Labels = Tuple[LabelSpec, ...]


class ChartKind(str, Enum):
    """Dashboard charts, valued by the id of the surface each one draws on."""

    VERTICAL_STACKED = "timeInRangeVerticalStacked"
    HORIZONTAL_SCALE = "timeInRangeHorizontalScale"
    HORIZONTAL_BAR = "timeInRangeHorizontal"
    GMI_PIE = "gmiPieChart"
    GMI_RANGES = "gmiRanges"


# =============================================================================
# VERTICAL STACKED BAR
# =============================================================================

def stack_segment_heights(
    time_in_range: TimeInRange, height: float
) -> Tuple[float, float, float, float]:
    """
    Pixel heights of the stacked segments, bottom to top.

    Order is (below, in range, above, very high). The very-high band is
    backed by VERY_HIGH_SENTINEL, not by snapshot data.
    """
    values = (
        time_in_range.below_range,
        time_in_range.in_range,
        time_in_range.above_range,
        VERY_HIGH_SENTINEL,
    )
    below, in_range, above, very_high = (value / 100 * height for value in values)
    return below, in_range, above, very_high


def vertical_stack_labels(time_in_range: TimeInRange, area: DrawArea) -> Labels:
    """
    Labels for the time-in-range stacked bar.

    Each data segment's label is vertically centred on its own span and
    offset to the right of the bar. The very-high label is pinned near the
    top of the draw area whatever its segment height.
    """
    bar_width = area.width * CATEGORY_PERCENTAGE * BAR_PERCENTAGE
    x = area.center.x + bar_width / 2 + SEGMENT_LABEL_MARGIN

    values = (time_in_range.below_range, time_in_range.in_range, time_in_range.above_range)
    heights = stack_segment_heights(time_in_range, area.height)[:3]

    labels = []
    stacked = 0.0
    for value, height in zip(values, heights):
        y = area.bottom - (stacked + height / 2)
        labels.append(LabelSpec(text=format_percent(value), anchor=Point(x, y), align="left"))
        stacked += height

    labels.append(LabelSpec(
        text=format_percent(VERY_HIGH_SENTINEL),
        anchor=Point(x, area.top + VERY_HIGH_PIN_OFFSET),
        align="left",
    ))
    return tuple(labels)


# =============================================================================
# HORIZONTAL SCALE
# =============================================================================

def scale_tick_positions(area: DrawArea) -> Tuple[float, ...]:
    """x position of every scale tick, left to right."""
    total = sum(SCALE_SEGMENT_WIDTHS)
    positions = [area.left]
    cumulative = 0.0
    for width in SCALE_SEGMENT_WIDTHS:
        cumulative += width
        positions.append(area.left + cumulative / total * area.width)
    return tuple(positions)


def scale_ruler_labels(area: DrawArea) -> Labels:
    """
    Tick labels above the glucose ruler.

    Ticks that close a divided segment carry a vertical connector spanning
    the bar, which is drawn as the divider line.
    """
    y = area.top - SCALE_LABEL_OFFSET
    labels = []
    for index, (tick, x) in enumerate(zip(SCALE_TICKS, scale_tick_positions(area))):
        connector: Tuple[Point, ...] = ()
        if index in SCALE_DIVIDERS_AFTER:
            connector = (Point(x, area.bottom), Point(x, area.top))
        labels.append(LabelSpec(text=str(tick), anchor=Point(x, y), connector=connector))
    return tuple(labels)


# =============================================================================
# PLAIN BARS
# =============================================================================

def horizontal_bar_labels(time_in_range: TimeInRange, area: DrawArea) -> Labels:
    """The horizontal time-in-range bar has no overlay."""
    return ()


def gmi_bar_labels(distribution: GmiDistribution, area: DrawArea) -> Labels:
    """The GMI range bars have no overlay."""
    return ()


# =============================================================================
# PIE
# =============================================================================

def pie_labels(
    distribution: GmiDistribution,
    area: DrawArea,
    rotation: float = PIE_ROTATION_DEGREES,
) -> Labels:
    """
    External labels for the GMI pie.

    Slices are drawn clockwise starting at 12 o'clock plus ``rotation``
    degrees. Each label sits at a fixed offset from the pie centre; its
    connector runs from the pie edge at the slice's midpoint angle, through
    an elbow just outside the edge, to the anchor.

    With a zero total no angle exists: every label keeps its fixed anchor
    and gets a zero-length connector.
    """
    values = (distribution.optimal, distribution.suboptimal, distribution.poor)
    center = area.center
    anchors = [Point(center.x + dx, center.y + dy) for dx, dy in PIE_LABEL_OFFSETS]

    total = sum(values)
    if not total > 0 or not math.isfinite(total):
        return tuple(
            LabelSpec(
                text=format_percent(value),
                anchor=anchor,
                connector=(anchor, anchor),
                mask_radius=PIE_LABEL_MASK_RADIUS,
            )
            for value, anchor in zip(values, anchors)
        )

    labels = []
    start = math.radians(rotation) - math.pi / 2
    for value, anchor in zip(values, anchors):
        span = value / total * 2 * math.pi
        mid = start + span / 2
        cos_mid, sin_mid = math.cos(mid), math.sin(mid)
        edge = Point(center.x + cos_mid * PIE_RADIUS, center.y + sin_mid * PIE_RADIUS)
        elbow = Point(
            center.x + cos_mid * (PIE_RADIUS + PIE_ELBOW_EXTENSION),
            center.y + sin_mid * (PIE_RADIUS + PIE_ELBOW_EXTENSION),
        )
        labels.append(LabelSpec(
            text=format_percent(value),
            anchor=anchor,
            connector=(edge, elbow, anchor),
            mask_radius=PIE_LABEL_MASK_RADIUS,
        ))
        start += span
    return tuple(labels)


# =============================================================================
# DISPATCH
# =============================================================================

_LAYOUTS: Dict[ChartKind, Callable[[MetricsSnapshot, DrawArea], Labels]] = {
    ChartKind.VERTICAL_STACKED: lambda s, area: vertical_stack_labels(s.time_in_range, area),
    ChartKind.HORIZONTAL_SCALE: lambda s, area: scale_ruler_labels(area),
    ChartKind.HORIZONTAL_BAR: lambda s, area: horizontal_bar_labels(s.time_in_range, area),
    ChartKind.GMI_PIE: lambda s, area: pie_labels(s.gmi.distribution, area),
    ChartKind.GMI_RANGES: lambda s, area: gmi_bar_labels(s.gmi.distribution, area),
}


def compute_labels(kind: ChartKind, snapshot: MetricsSnapshot, area: DrawArea) -> Labels:
    """Compute the overlay labels of one chart."""
    return _LAYOUTS[ChartKind(kind)](snapshot, area)
