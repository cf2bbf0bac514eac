"""
Tests for the marker detector.

Synthetic 200x100 frames with a 10% margin give ROI (20, 10, 180, 90);
the rightmost 20% of that ROI starts at x=148.
"""

import numpy as np

from bookmap_watcher.config import DetectionConfig
from bookmap_watcher.frame import Frame
from bookmap_watcher.geometry import Rect
from bookmap_watcher.marker_detector import find_marker, marker_window
from bookmap_watcher.roi import central_roi

WHITE = (255, 255, 255)
CONFIG = DetectionConfig(
    roi_margin_percent=0.1,
    max_distance_bubble_to_line=10,
    bubble_min_bright_pixels=150,
)
ROI = Rect(20, 10, 180, 90)


def _frame(rgb):
    return Frame.from_array(rgb)


def _canvas():
    return np.zeros((100, 200, 3), dtype=np.uint8)


def test_roi_matches_fixture():
    assert central_roi(Rect(0, 0, 200, 100), CONFIG.roi_margin_percent) == ROI


def test_window_geometry():
    window = marker_window(ROI, 50, CONFIG)
    assert window == Rect(148, 40, 180, 60)


def test_block_at_exact_minimum_is_found():
    rgb = _canvas()
    rgb[45:60, 160:170] = WHITE  # 15 x 10 = 150 pixels

    result = find_marker(_frame(rgb), ROI, 50, CONFIG)

    assert result.found
    assert result.bright_count == 150


def test_one_pixel_short_is_not_found():
    rgb = _canvas()
    rgb[45:60, 160:170] = WHITE
    rgb[59, 169] = (0, 0, 0)

    result = find_marker(_frame(rgb), ROI, 50, CONFIG)

    assert not result.found
    assert result.bright_count == 149


def test_bright_pixels_left_of_slice_are_ignored():
    rgb = _canvas()
    rgb[40:60, 20:148] = WHITE

    result = find_marker(_frame(rgb), ROI, 50, CONFIG)

    assert result.bright_count == 0
    assert not result.found


def test_window_clamps_at_roi_top():
    rgb = _canvas()
    rgb[:, :] = WHITE

    result = find_marker(_frame(rgb), ROI, 12, CONFIG)

    assert result.window == Rect(148, 10, 180, 22)
    assert ROI.contains(result.window)
    assert result.bright_count == result.window.area == 32 * 12


def test_window_clamps_at_roi_bottom():
    rgb = _canvas()
    rgb[:, :] = WHITE

    result = find_marker(_frame(rgb), ROI, 85, CONFIG)

    assert result.window == Rect(148, 75, 180, 90)
    assert result.bright_count == 32 * 15


def test_line_outside_roi_yields_empty_window():
    rgb = _canvas()
    rgb[:, :] = WHITE

    result = find_marker(_frame(rgb), ROI, 200, CONFIG)

    assert result.window.is_empty
    assert result.bright_count == 0
    assert not result.found


def test_inverted_roi_from_large_margin_finds_nothing():
    rgb = _canvas()
    rgb[:, :] = WHITE
    frame = _frame(rgb)

    roi = central_roi(frame.bounds, 0.6)
    result = find_marker(frame, roi, 50, CONFIG)

    assert roi.min_x > roi.max_x
    assert result.window.is_empty
    assert result.bright_count == 0
    assert not result.found
