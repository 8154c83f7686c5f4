"""geometry.py - Float axis-aligned boxes for hit detection."""

from __future__ import annotations

from typing import NamedTuple


class Box(NamedTuple):
    """Axis-aligned rectangle; (x, y) is the top-left corner, y grows down."""

    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    def overlaps(self, other: "Box") -> bool:
        """Strict intersection: boxes that only touch on an edge do not overlap."""
        return (self.x < other.right and self.right > other.x
                and self.y < other.bottom and self.bottom > other.y)
