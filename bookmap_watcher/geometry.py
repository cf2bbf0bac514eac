"""
Axis-aligned integer rectangles.

Used for both the full frame bounds and the region of interest. The
half-open convention applies everywhere: a pixel (x, y) belongs to a
rectangle when min_x <= x < max_x and min_y <= y < max_y.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Rect:
    """An axis-aligned integer region in absolute pixel coordinates.

    Attributes:
        min_x: Left edge (inclusive).
        min_y: Top edge (inclusive).
        max_x: Right edge (exclusive).
        max_y: Bottom edge (exclusive).
    """

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y

    @property
    def area(self) -> int:
        """Pixel count, zero for degenerate or inverted rectangles."""
        if self.is_empty:
            return 0
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains(self, other: "Rect") -> bool:
        """Return True if ``other`` lies entirely inside this rectangle."""
        return (
            self.min_x <= other.min_x
            and self.min_y <= other.min_y
            and other.max_x <= self.max_x
            and other.max_y <= self.max_y
        )

    def to_dict(self) -> dict:
        """Return a plain dict suitable for logging or JSON."""
        return {
            "min_x": self.min_x,
            "min_y": self.min_y,
            "max_x": self.max_x,
            "max_y": self.max_y,
        }
