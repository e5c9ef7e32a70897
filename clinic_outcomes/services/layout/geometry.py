"""
Geometry value types shared by the label layout engine and the chart builder.

All coordinates are canvas pixels with the origin at the top-left corner and
y growing downward.
"""
from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Padding:
    """Space between the canvas edge and the chart draw area."""
    left: float = 0.0
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0


@dataclass(frozen=True)
class DrawArea:
    """The rectangle a chart draws its data into."""
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center(self) -> Point:
        return Point((self.left + self.right) / 2, (self.top + self.bottom) / 2)

    @classmethod
    def from_canvas(cls, width: float, height: float, padding: Padding = Padding()) -> "DrawArea":
        """Draw area of a canvas after removing its padding."""
        return cls(
            left=padding.left,
            top=padding.top,
            right=width - padding.right,
            bottom=height - padding.bottom,
        )


@dataclass(frozen=True)
class LabelSpec:
    """
    One overlay label: text at an anchor, with an optional connector line.

    ``connector`` runs from the data segment edge to the anchor.
    ``mask_radius`` is the radius of a filled disc drawn behind the text.
    """
    text: str
    anchor: Point
    connector: Tuple[Point, ...] = field(default_factory=tuple)
    align: str = "center"
    mask_radius: Optional[float] = None


def format_percent(value: float) -> str:
    """Format a percentage for a label: ``82 -> "82%"``, ``12.5 -> "12.5%"``."""
    rounded = round(float(value), 1)
    if rounded == int(rounded):
        return f"{int(rounded)}%"
    return f"{rounded}%"
