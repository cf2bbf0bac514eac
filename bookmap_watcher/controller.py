"""
Poll controller: the watcher's main loop.

State machine:
    Idle  --(poll interval elapsed)-->  Cycle
    Cycle --(always, success or not)--> Idle

One cycle:
    capture → ROI → line scan → snapshot + classification (side effects)
    → marker scan (only if a line was found) → alert (fire-and-forget)

Failure policy:
    Every collaborator raises from the WatcherError taxonomy. This module
    is the only place those are caught: each is logged, recorded in the
    CycleReport, and the loop carries on. A capture failure ends the
    cycle early; snapshot and classification failures do not affect
    detection.

Concurrency:
    Cycles never overlap. Capture, snapshot and the classification call
    block the loop; capture.timeout_s and classifier.timeout_s bound the
    capture and the network call. Only the alert runs on its own thread.
"""

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from bookmap_watcher.config import AppConfig
from bookmap_watcher.detection import LineDetectionResult, MarkerDetectionResult
from bookmap_watcher.errors import (
    CaptureError,
    ClassificationServiceError,
    SnapshotWriteError,
    WatcherError,
)
from bookmap_watcher.geometry import Rect
from bookmap_watcher.line_detector import find_line
from bookmap_watcher.marker_detector import find_marker
from bookmap_watcher.roi import central_roi
from bookmap_watcher.snapshot import encode_png, write_snapshot

logger = logging.getLogger(__name__)


@dataclass
class CycleReport:
    """What happened during one cycle. Built fresh and discarded after logging."""

    roi: Optional[Rect] = None
    line: Optional[LineDetectionResult] = None
    marker: Optional[MarkerDetectionResult] = None
    stock_price: Optional[float] = None
    snapshot_path: Optional[Path] = None
    alert_dispatched: bool = False
    errors: List[WatcherError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class PollController:
    """Drives detection cycles at a fixed interval until stopped.

    Usage:
        controller = PollController(config, source, dispatcher, classifier)
        controller.run()            # forever, until stop() or Ctrl-C
        report = controller.run_cycle()   # a single pass
    """

    def __init__(
        self,
        config: AppConfig,
        source,
        dispatcher,
        classifier=None,
        snapshot_path: Optional[Union[str, Path]] = None,
    ) -> None:
        """
        Args:
            config: Frozen application configuration.
            source: Anything with ``capture() -> Frame``.
            dispatcher: Anything with ``dispatch(line_y)``; must not block.
            classifier: Optional object with ``classify(png) -> float``.
            snapshot_path: Where to write the per-cycle PNG; None disables it.
        """
        self._config = config
        self._source = source
        self._dispatcher = dispatcher
        self._classifier = classifier
        self._snapshot_path = snapshot_path
        self._stop = threading.Event()
        self._cycles = 0

    @property
    def cycles(self) -> int:
        """Number of cycles started so far."""
        return self._cycles

    def stop(self) -> None:
        """Ask the loop to exit after the current cycle or sleep."""
        self._stop.set()

    def run(self, max_cycles: Optional[int] = None) -> None:
        """Run cycles until stop() is called or ``max_cycles`` is reached.

        No exception escapes a cycle: the next tick is the retry.
        """
        interval = self._config.detection.poll_interval_s
        logger.info("Bookmap watcher started (interval=%.1fs).", interval)

        while not self._stop.is_set():
            try:
                self.run_cycle()
            except Exception:
                logger.exception("Unexpected error during cycle %d", self._cycles)

            if max_cycles is not None and self._cycles >= max_cycles:
                break

            # Idle; returns early if stop() is called
            self._stop.wait(interval)

        logger.info("Bookmap watcher stopped after %d cycle(s).", self._cycles)

    def run_cycle(self) -> CycleReport:
        """Execute one capture → detect → alert pass."""
        self._cycles += 1
        report = CycleReport()
        det_cfg = self._config.detection

        try:
            frame = self._source.capture()
        except CaptureError as e:
            logger.error("error: capture failed: %s", e)
            report.errors.append(e)
            return report

        report.roi = central_roi(frame.bounds, det_cfg.roi_margin_percent)
        report.line = find_line(frame, report.roi, det_cfg)

        self._run_side_effects(frame, report)

        if not report.line.found:
            return report

        report.marker = find_marker(frame, report.roi, report.line.y, det_cfg)
        if report.marker.found:
            self._dispatcher.dispatch(report.line.y)
            report.alert_dispatched = True

        return report

    def _run_side_effects(self, frame, report: CycleReport) -> None:
        """Snapshot and classification. Failures are logged, never raised."""
        if self._snapshot_path is None and self._classifier is None:
            return

        try:
            png = encode_png(frame)
        except SnapshotWriteError as e:
            logger.warning("error encoding image: %s", e)
            report.errors.append(e)
            return

        if self._snapshot_path is not None:
            try:
                report.snapshot_path = write_snapshot(frame, self._snapshot_path, png=png)
            except SnapshotWriteError as e:
                logger.warning("error saving image: %s", e)
                report.errors.append(e)

        if self._classifier is not None:
            try:
                report.stock_price = self._classifier.classify(png)
            except ClassificationServiceError as e:
                logger.warning("error getting stock price from AI: %s", e)
                report.errors.append(e)
            else:
                logger.info("Stock price detected: $%.2f", report.stock_price)
