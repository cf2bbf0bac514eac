"""
Marker detector.

Confirms a bright "bubble" next to a detected line. The search window is
fixed geometry: the rightmost slice of the ROI (20% by default), and
``max_distance_bubble_to_line`` rows above and below the line, clamped to
the ROI so scanning never leaves it.

Non-goals:
    - Not a general blob detector. Shape and connectivity are ignored;
      only the bright-pixel count inside the window matters.
"""

import logging

from bookmap_watcher.classifiers import bright_mask
from bookmap_watcher.config import DetectionConfig
from bookmap_watcher.detection import MarkerDetectionResult
from bookmap_watcher.frame import Frame
from bookmap_watcher.geometry import Rect

logger = logging.getLogger(__name__)


def marker_window(roi: Rect, line_y: int, config: DetectionConfig) -> Rect:
    """Return the clamped search window for a line at ``line_y``.

    The Y range is half-open: [line_y - d, line_y + d), as in the row scan.
    """
    x_start = roi.min_x + int(roi.width * (1.0 - config.marker_search_fraction))
    d = config.max_distance_bubble_to_line

    y_min = max(line_y - d, roi.min_y)
    y_max = min(line_y + d, roi.max_y)

    return Rect(x_start, y_min, roi.max_x, y_max)


def find_marker(
    frame: Frame,
    roi: Rect,
    line_y: int,
    config: DetectionConfig,
) -> MarkerDetectionResult:
    """Count bright pixels near the right edge around ``line_y``.

    Args:
        frame: Captured frame.
        roi: Region of interest used for the line scan.
        line_y: Absolute row of the detected line.
        config: Brightness threshold, minimum count and window size.

    Returns:
        A MarkerDetectionResult; found iff the count reaches
        ``bubble_min_bright_pixels``.
    """
    window = marker_window(roi, line_y, config)

    bright_count = 0
    if not window.is_empty:
        block = frame.region(window)
        if block.size:
            bright_count = int(bright_mask(block, config).sum())

    found = bright_count >= config.bubble_min_bright_pixels
    if found:
        logger.info(
            "Bubble detected near line at Y=%d (%d bright pixels)",
            line_y, bright_count,
        )
    else:
        logger.debug(
            "No bubble near line at Y=%d (%d bright pixels, need %d)",
            line_y, bright_count, config.bubble_min_bright_pixels,
        )

    return MarkerDetectionResult(found=found, bright_count=bright_count, window=window)
