"""
Frame data object.

A Frame is one captured screen image: an immutable RGB pixel grid plus
the absolute bounding rectangle it covers. Monitors can sit at a
non-zero origin, so every detector addresses pixels in absolute
coordinates and the Frame translates them into array indices.

Non-goals:
    - No capture or file I/O (see capture.py and snapshot.py).
    - No detection logic.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from bookmap_watcher.geometry import Rect


@dataclass(frozen=True, eq=False)
class Frame:
    """A captured image with its pixel-space bounds.

    Attributes:
        pixels: Read-only RGB array with shape (H, W, 3) and dtype uint8.
        bounds: Absolute rectangle covered by ``pixels``.
    """

    pixels: np.ndarray
    bounds: Rect

    def __post_init__(self) -> None:
        if not isinstance(self.pixels, np.ndarray):
            raise TypeError(
                f"Expected pixels to be a numpy ndarray, "
                f"got {type(self.pixels).__name__}."
            )
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 3:
            raise ValueError(
                f"Expected an (H, W, 3) RGB array, got shape {self.pixels.shape}."
            )
        if self.pixels.dtype != np.uint8:
            raise ValueError(
                f"Expected dtype uint8, got {self.pixels.dtype}. "
                f"Use Frame.from_array() to normalize other precisions."
            )
        h, w = self.pixels.shape[:2]
        if self.bounds.width != w or self.bounds.height != h:
            raise ValueError(
                f"Bounds {self.bounds} do not match pixel grid {w}x{h}."
            )
        # Keep a private read-only copy; the caller's array stays writable
        if self.pixels.flags.writeable:
            pixels = np.array(self.pixels, order="C")
            pixels.flags.writeable = False
            object.__setattr__(self, "pixels", pixels)

    @classmethod
    def from_array(cls, rgb: np.ndarray, origin: Tuple[int, int] = (0, 0)) -> "Frame":
        """Build a Frame from an RGB array, normalizing to 8 bits per channel.

        16-bit input keeps the high byte of each sample. An alpha channel,
        if present, is dropped.
        """
        arr = np.asarray(rgb)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise ValueError(
                f"Expected an (H, W, 3) or (H, W, 4) array, got shape {arr.shape}."
            )
        arr = arr[:, :, :3]
        if arr.dtype == np.uint16:
            arr = (arr >> 8).astype(np.uint8)
        elif arr.dtype != np.uint8:
            arr = np.clip(arr, 0, 255).astype(np.uint8)

        pixels = np.array(arr, order="C")
        pixels.flags.writeable = False

        x0, y0 = origin
        h, w = arr.shape[:2]
        return cls(
            pixels=pixels,
            bounds=Rect(x0, y0, x0 + w, y0 + h),
        )

    @classmethod
    def from_bgra(cls, bgra: np.ndarray, origin: Tuple[int, int] = (0, 0)) -> "Frame":
        """Build a Frame from a BGRA array as returned by mss."""
        arr = np.asarray(bgra, dtype=np.uint8)
        return cls.from_array(arr[:, :, 2::-1], origin)

    @property
    def width(self) -> int:
        return self.bounds.width

    @property
    def height(self) -> int:
        return self.bounds.height

    def region(self, rect: Rect) -> np.ndarray:
        """Return the (read-only) pixel block covered by an absolute rectangle.

        The rectangle is clipped to the frame bounds; an empty intersection
        yields an array with zero rows or columns.
        """
        x0 = max(rect.min_x, self.bounds.min_x) - self.bounds.min_x
        y0 = max(rect.min_y, self.bounds.min_y) - self.bounds.min_y
        x1 = min(rect.max_x, self.bounds.max_x) - self.bounds.min_x
        y1 = min(rect.max_y, self.bounds.max_y) - self.bounds.min_y
        return self.pixels[y0:max(y0, y1), x0:max(x0, x1)]

    def rgb_at(self, x: int, y: int) -> Tuple[int, int, int]:
        """Return the (r, g, b) sample at absolute coordinates."""
        r, g, b = self.pixels[y - self.bounds.min_y, x - self.bounds.min_x]
        return int(r), int(g), int(b)

    def to_bgr(self) -> np.ndarray:
        """Return a writable BGR copy for OpenCV."""
        return np.ascontiguousarray(self.pixels[:, :, ::-1])
