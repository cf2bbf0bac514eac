"""
Line detector.

Scans the ROI row by row and picks the single row with the most
line-colored pixels, provided it reaches ``min_red_pixels_per_row``.

Scan policy:
    - Global maximum, not first match: a later row with a strictly
      higher count replaces an earlier one.
    - Ties go to the lower Y (earlier in scan order).
    - Rows below the threshold never become the answer, and a row with
      zero matches never does either.
"""

import logging

import numpy as np

from bookmap_watcher.classifiers import line_color_mask
from bookmap_watcher.config import DetectionConfig
from bookmap_watcher.detection import LineDetectionResult
from bookmap_watcher.frame import Frame
from bookmap_watcher.geometry import Rect

logger = logging.getLogger(__name__)


def find_line(frame: Frame, roi: Rect, config: DetectionConfig) -> LineDetectionResult:
    """Locate the densest line-colored row inside ``roi``.

    Args:
        frame: Captured frame.
        roi: Absolute region to scan. An empty ROI finds nothing.
        config: Color bounds and per-row threshold.

    Returns:
        A LineDetectionResult with the absolute row index when found.
    """
    block = frame.region(roi)
    if block.size == 0:
        return LineDetectionResult.not_found()

    counts = line_color_mask(block, config).sum(axis=1)

    # argmax returns the first index on ties, matching ascending-Y scan order
    best_idx = int(np.argmax(counts))
    best_count = int(counts[best_idx])

    if best_count == 0 or best_count < config.min_red_pixels_per_row:
        logger.debug(
            "No line: best row count %d below threshold %d",
            best_count, config.min_red_pixels_per_row,
        )
        return LineDetectionResult.not_found()

    # The clipped block starts at the top of roi ∩ frame
    y = max(roi.min_y, frame.bounds.min_y) + best_idx
    logger.info("Red line near Y=%d (%d red pixels)", y, best_count)
    return LineDetectionResult(found=True, y=y, pixel_count=best_count)
