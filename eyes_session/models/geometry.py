"""Geometry primitives used for screenshot bounds and trigger normalization."""

from __future__ import annotations

from pydantic import BaseModel


class Location(BaseModel):
    x: int = 0
    y: int = 0

    def offset(self, dx: int, dy: int) -> "Location":
        return Location(x=self.x + dx, y=self.y + dy)


class RectangleSize(BaseModel):
    width: int = 0
    height: int = 0

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


class Region(BaseModel):
    """An axis-aligned rectangle; ``left``/``top`` is the inclusive origin."""
    left: int = 0
    top: int = 0
    width: int = 0
    height: int = 0

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def size(self) -> RectangleSize:
        return RectangleSize(width=self.width, height=self.height)

    def offset(self, dx: int, dy: int) -> "Region":
        return Region(left=self.left + dx, top=self.top + dy, width=self.width, height=self.height)

    def intersect(self, other: "Region") -> "Region":
        """Return the overlap of two regions, or an empty region when they are disjoint."""
        left = max(self.left, other.left)
        top = max(self.top, other.top)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        if right <= left or bottom <= top:
            return Region()
        return Region(left=left, top=top, width=right - left, height=bottom - top)

    def contains(self, point: Location) -> bool:
        return self.left <= point.x < self.right and self.top <= point.y < self.bottom
