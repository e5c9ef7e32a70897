"""
Label layout package for the dashboard chart overlays.

Usage:
    from clinic_outcomes.services.layout import ChartKind, DrawArea, compute_labels

    labels = compute_labels(ChartKind.GMI_PIE, snapshot, DrawArea(0, 0, 300, 240))
"""

from clinic_outcomes.services.layout.engine import (
    ChartKind,
    compute_labels,
    gmi_bar_labels,
    horizontal_bar_labels,
    pie_labels,
    scale_ruler_labels,
    scale_tick_positions,
    stack_segment_heights,
    vertical_stack_labels,
)
from clinic_outcomes.services.layout.geometry import (
    DrawArea,
    LabelSpec,
    Padding,
    Point,
    format_percent,
)

__all__ = [
    'ChartKind',
    'compute_labels',
    'gmi_bar_labels',
    'horizontal_bar_labels',
    'pie_labels',
    'scale_ruler_labels',
    'scale_tick_positions',
    'stack_segment_heights',
    'vertical_stack_labels',
    'DrawArea',
    'LabelSpec',
    'Padding',
    'Point',
    'format_percent',
]
