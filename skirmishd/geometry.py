"""Integer vectors and rectangles in simulation space."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class IVec2:
    """A two-dimensional integer vector."""

    x: int
    y: int

    def __add__(self, other: IVec2) -> IVec2:
        if not isinstance(other, IVec2):
            return NotImplemented
        return IVec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: IVec2) -> IVec2:
        if not isinstance(other, IVec2):
            return NotImplemented
        return IVec2(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class IRect:
    """An axis-aligned rectangle with inclusive corners."""

    min: IVec2
    max: IVec2

    def contains(self, point: IVec2) -> bool:
        """Return whether ``point`` lies inside the rectangle, edges included."""
        return (
            self.min.x <= point.x <= self.max.x
            and self.min.y <= point.y <= self.max.y
        )