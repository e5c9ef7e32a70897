"""
Drawing surfaces of the dashboard page.

A surface is the named, fixed-size area one chart is built into. Its padding
determines the chart's draw area, which is what the label layout engine
measures against.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable

from clinic_outcomes.services.layout import ChartKind, DrawArea, Padding

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SurfaceSpec:
    """One drawing surface: its chart kind, canvas size and padding."""
    kind: ChartKind
    width: int
    height: int
    padding: Padding = Padding()

    @property
    def surface_id(self) -> str:
        return self.kind.value

    @property
    def draw_area(self) -> DrawArea:
        return DrawArea.from_canvas(self.width, self.height, self.padding)


SURFACES: Dict[str, SurfaceSpec] = {
    spec.surface_id: spec
    for spec in (
        SurfaceSpec(ChartKind.VERTICAL_STACKED, 160, 240, Padding(left=20, right=60)),
        SurfaceSpec(ChartKind.HORIZONTAL_SCALE, 360, 60, Padding(left=10, top=20, right=10, bottom=5)),
        SurfaceSpec(ChartKind.HORIZONTAL_BAR, 360, 40),
        SurfaceSpec(ChartKind.GMI_PIE, 300, 240, Padding(left=40, top=20, right=40, bottom=20)),
        SurfaceSpec(ChartKind.GMI_RANGES, 300, 160),
    )
}


def mounted_surfaces(surface_ids: Iterable[str]) -> Dict[str, SurfaceSpec]:
    """Surfaces present in the page layout, keyed by id. Unknown ids are ignored."""
    mounted = {}
    for surface_id in surface_ids:
        spec = SURFACES.get(surface_id)
        if spec is None:
            logger.warning("Unknown drawing surface", extra={"surface_id": surface_id})
            continue
        mounted[surface_id] = spec
    return mounted
