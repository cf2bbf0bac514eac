"""
Tests for the line detector.

Synthetic 200x100 frames with a 10% margin give ROI (20, 10, 180, 90).
"""

import numpy as np

from bookmap_watcher.config import DetectionConfig
from bookmap_watcher.frame import Frame
from bookmap_watcher.geometry import Rect
from bookmap_watcher.line_detector import find_line
from bookmap_watcher.roi import central_roi

RED = (255, 0, 0)
CONFIG = DetectionConfig(min_red_pixels_per_row=50, roi_margin_percent=0.1)


def _canvas(width=200, height=100):
    return np.zeros((height, width, 3), dtype=np.uint8)


def _paint_row(rgb, y, x_start, count, color=RED):
    rgb[y, x_start:x_start + count] = color


def _detect(rgb, config=CONFIG, origin=(0, 0)):
    frame = Frame.from_array(rgb, origin=origin)
    roi = central_roi(frame.bounds, config.roi_margin_percent)
    return find_line(frame, roi, config)


def test_row_at_exact_threshold_is_found():
    rgb = _canvas()
    _paint_row(rgb, 42, 30, 50)
    _paint_row(rgb, 60, 30, 49)
    _paint_row(rgb, 75, 30, 10)

    result = _detect(rgb)

    assert result.found
    assert result.y == 42
    assert result.pixel_count == 50


def test_below_threshold_everywhere_is_not_found():
    rgb = _canvas()
    for y in range(10, 90):
        _paint_row(rgb, y, 25, 49)

    result = _detect(rgb)

    assert not result.found
    assert result.y is None


def test_tie_goes_to_lower_row():
    rgb = _canvas()
    _paint_row(rgb, 70, 30, 60)
    _paint_row(rgb, 30, 40, 60)

    assert _detect(rgb).y == 30


def test_global_maximum_not_first_match():
    rgb = _canvas()
    _paint_row(rgb, 30, 30, 55)
    _paint_row(rgb, 70, 30, 80)
    _paint_row(rgb, 80, 30, 20)

    result = _detect(rgb)

    assert result.y == 70
    assert result.pixel_count == 80


def test_pixels_outside_roi_are_ignored():
    rgb = _canvas()
    rgb[5, :] = RED          # above the ROI
    rgb[:, 0:20] = RED       # left margin
    rgb[95, :] = RED         # below the ROI

    assert not _detect(rgb).found


def test_orange_counts_as_line():
    rgb = _canvas()
    _paint_row(rgb, 50, 20, 160, color=(240, 110, 30))

    result = _detect(rgb)

    assert result.found
    assert result.pixel_count == 160


def test_absolute_coordinates_with_offset_origin():
    rgb = _canvas()
    _paint_row(rgb, 42, 30, 100)

    result = _detect(rgb, origin=(-1920, 300))

    assert result.y == 342


def test_empty_roi_finds_nothing():
    rgb = _canvas()
    rgb[:, :] = RED
    frame = Frame.from_array(rgb)

    result = find_line(frame, Rect(100, 50, 100, 50), CONFIG)

    assert not result.found


def test_zero_threshold_still_needs_a_match():
    result = _detect(_canvas(), config=DetectionConfig(min_red_pixels_per_row=0))
    assert not result.found


def test_inverted_roi_from_large_margin_finds_nothing():
    rgb = _canvas()
    rgb[:, :] = RED
    frame = Frame.from_array(rgb)

    roi = central_roi(frame.bounds, 0.6)
    result = find_line(frame, roi, CONFIG)

    assert roi.min_x > roi.max_x and roi.min_y > roi.max_y
    assert not result.found
