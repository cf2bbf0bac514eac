"""
Detection result objects.

Frozen containers produced fresh every cycle by the line and marker
detectors. They carry no behavior beyond data access and are never
persisted across cycles.
"""

from dataclasses import dataclass
from typing import Optional

from bookmap_watcher.geometry import Rect


@dataclass(frozen=True, slots=True)
class LineDetectionResult:
    """Outcome of the row-wise line scan.

    Attributes:
        found: Whether any row cleared the per-row threshold.
        y: Absolute row of the line, None when not found.
        pixel_count: Line-colored pixels on that row (0 when not found).
    """

    found: bool
    y: Optional[int] = None
    pixel_count: int = 0

    @classmethod
    def not_found(cls) -> "LineDetectionResult":
        return cls(found=False)

    def to_dict(self) -> dict:
        """Return a plain dict suitable for logging or JSON."""
        return {"found": self.found, "y": self.y, "pixel_count": self.pixel_count}


@dataclass(frozen=True, slots=True)
class MarkerDetectionResult:
    """Outcome of the bright-marker scan near a line.

    Attributes:
        found: Whether bright_count reached the configured minimum.
        bright_count: Bright pixels inside the search window.
        window: The clamped search window that was scanned.
    """

    found: bool
    bright_count: int
    window: Rect

    def to_dict(self) -> dict:
        """Return a plain dict suitable for logging or JSON."""
        return {
            "found": self.found,
            "bright_count": self.bright_count,
            "window": self.window.to_dict(),
        }
