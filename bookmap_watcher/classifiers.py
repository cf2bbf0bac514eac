"""
Pixel classifiers.

Two pure predicates over an (r, g, b) triple in 0-255 range, plus
vectorized numpy masks with identical semantics for whole pixel blocks.
The detectors use the masks; the scalar forms document the rule and
are handy for spot checks.

Hard-coded:
    - Brightness is the plain channel sum r+g+b, not luminance. The
      marker is a solid bright blob on a dark chart, so this is enough.
"""

import numpy as np

from bookmap_watcher.config import DetectionConfig


def is_line_colored(r: int, g: int, b: int, config: DetectionConfig) -> bool:
    """Strong red with capped green/blue.

    Accepts red through orange and yellow on purpose: heat-map lines
    are rarely pure red.
    """
    return r >= config.red_min_r and g <= config.red_max_g and b <= config.red_max_b


def is_bright(r: int, g: int, b: int, config: DetectionConfig) -> bool:
    """Channel sum at or above the bright threshold."""
    return int(r) + int(g) + int(b) >= config.bubble_bright_threshold


def line_color_mask(pixels: np.ndarray, config: DetectionConfig) -> np.ndarray:
    """Boolean (H, W) mask of line-colored pixels in an RGB block."""
    r = pixels[..., 0]
    g = pixels[..., 1]
    b = pixels[..., 2]
    return (r >= config.red_min_r) & (g <= config.red_max_g) & (b <= config.red_max_b)


def bright_mask(pixels: np.ndarray, config: DetectionConfig) -> np.ndarray:
    """Boolean (H, W) mask of bright pixels in an RGB block."""
    # uint8 sums would wrap at 255
    total = pixels.astype(np.int32).sum(axis=-1)
    return total >= config.bubble_bright_threshold
