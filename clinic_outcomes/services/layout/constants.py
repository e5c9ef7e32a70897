"""
Layout constants for the chart label overlays.

Pixel offsets are tied to the dashboard's surface sizes (see SURFACES in
services/charts/surfaces.py). Keep them here so label geometry can be tested
without a rendering surface.
"""
from typing import Tuple

# =============================================================================
# VERTICAL STACKED BAR (time in range)
# =============================================================================

# Constant value backing the "very high" band on top of the stack
VERY_HIGH_SENTINEL: float = 1.0

# Bar sizing, as fractions of the draw-area width
CATEGORY_PERCENTAGE: float = 0.4
BAR_PERCENTAGE: float = 0.3

# Gap between the right edge of the bar and the segment labels
SEGMENT_LABEL_MARGIN: float = 20.0

# The very-high label sits this far below the top of the draw area
VERY_HIGH_PIN_OFFSET: float = 8.0

# =============================================================================
# HORIZONTAL SCALE (glucose ruler, mg/dL)
# =============================================================================

SCALE_TICKS: Tuple[int, ...] = (40, 54, 70, 180, 240, 400)
SCALE_SEGMENT_WIDTHS: Tuple[float, ...] = (14, 16, 110, 60, 160)

# Segment indexes (1-based) followed by a divider line
SCALE_DIVIDERS_AFTER: Tuple[int, ...] = (1, 3, 5)

# Tick labels sit this far above the draw area
SCALE_LABEL_OFFSET: float = 5.0

# =============================================================================
# PIE (GMI distribution)
# =============================================================================

# Base rotation in degrees, applied on top of the 12 o'clock start
PIE_ROTATION_DEGREES: float = 150.0

PIE_RADIUS: float = 80.0

# How far past the pie edge the connector elbow sits
PIE_ELBOW_EXTENSION: float = 12.0

# Fixed label anchors relative to the pie centre, in rendering order:
# optimal (left), suboptimal (right), poor (lower right)
PIE_LABEL_OFFSETS: Tuple[Tuple[float, float], ...] = (
    (-80.0, -20.0),
    (80.0, 10.0),
    (20.0, 80.0),
)

# Radius of the background disc drawn behind each pie label
PIE_LABEL_MASK_RADIUS: float = 14.0
