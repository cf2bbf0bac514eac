"""
Bookmap watcher: screen monitor for a red line meeting a price bubble.

Public API:
    - central_roi, find_line, find_marker: the detection pipeline.
    - PollController: runs the pipeline on a timer and raises alerts.
    - Frame, Rect: the data model the pipeline works on.
    - load_config: layered, frozen configuration.

Usage:
    from bookmap_watcher import Frame, central_roi, find_line, find_marker, load_config

    config = load_config()
    roi = central_roi(frame.bounds, config.detection.roi_margin_percent)
    line = find_line(frame, roi, config.detection)
"""

from bookmap_watcher.config import AppConfig, DetectionConfig, load_config
from bookmap_watcher.controller import CycleReport, PollController
from bookmap_watcher.detection import LineDetectionResult, MarkerDetectionResult
from bookmap_watcher.frame import Frame
from bookmap_watcher.geometry import Rect
from bookmap_watcher.line_detector import find_line
from bookmap_watcher.marker_detector import find_marker
from bookmap_watcher.roi import central_roi

__all__ = [
    "AppConfig",
    "CycleReport",
    "DetectionConfig",
    "Frame",
    "LineDetectionResult",
    "MarkerDetectionResult",
    "PollController",
    "Rect",
    "central_roi",
    "find_line",
    "find_marker",
    "load_config",
]
