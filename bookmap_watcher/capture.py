"""
Frame sources for the watcher.

Responsibility:
    Produce one Frame per call from either a live monitor (mss) or a
    set of image files replayed in order. Both expose the same
    ``capture() -> Frame`` call so the poll controller does not care
    where pixels come from.

Non-goals:
    - No detection, drawing, or output writing.
    - No retries: a failed capture raises CaptureError and the next poll
      tick is the retry.
    - No multi-monitor reasoning. Exactly one monitor is watched.
"""

import logging
import os
import threading
from pathlib import Path
from typing import List, Optional, Union

import cv2
import mss
import numpy as np
from mss.exception import ScreenShotError

from bookmap_watcher.config import CaptureConfig
from bookmap_watcher.errors import CaptureError
from bookmap_watcher.frame import Frame

logger = logging.getLogger(__name__)

# Image extensions recognized for offline replay
_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp"}


class ScreenCapturer:
    """Grabs a single monitor with mss.

    Monitor 0 in mss is the virtual union of all screens; 1 is the
    primary display, which is the default.

    With ``timeout_s`` set, the grab runs on a daemon thread and a grab
    that outlives the timeout is reported as a CaptureError. The stuck
    thread is abandoned, not cancelled. Without it the call blocks.

    Usage:
        capturer = ScreenCapturer(monitor_index=1, timeout_s=5.0)
        frame = capturer.capture()
    """

    def __init__(self, monitor_index: int = 1, timeout_s: Optional[float] = None) -> None:
        self._monitor_index = monitor_index
        self._timeout_s = timeout_s
        logger.info(
            "ScreenCapturer initialized: monitor=%d, timeout=%s", monitor_index, timeout_s
        )

    def capture(self) -> Frame:
        """Grab the configured monitor.

        Raises:
            CaptureError: If no monitor is available, the index is out of
                          range, the grab fails, or it exceeds the timeout.
        """
        if self._timeout_s is None:
            return self._grab()

        outcome = {}

        def target() -> None:
            try:
                outcome["frame"] = self._grab()
            except Exception as e:
                outcome["error"] = e

        worker = threading.Thread(target=target, name="screen-grab", daemon=True)
        worker.start()
        worker.join(self._timeout_s)

        if worker.is_alive():
            raise CaptureError(f"screen grab timed out after {self._timeout_s}s")
        if "error" in outcome:
            raise outcome["error"]
        return outcome["frame"]

    def _grab(self) -> Frame:
        try:
            with mss.mss() as sct:
                monitors = sct.monitors
                # monitors[0] is the virtual screen, real displays start at 1
                if len(monitors) <= 1:
                    raise CaptureError("no active displays found")
                if self._monitor_index >= len(monitors):
                    raise CaptureError(
                        f"monitor index {self._monitor_index} out of range, "
                        f"available: 0..{len(monitors) - 1}"
                    )
                monitor = monitors[self._monitor_index]
                shot = sct.grab(monitor)
        except ScreenShotError as e:
            raise CaptureError(f"screen grab failed: {e}") from e

        # BGRA layout from mss
        bgra = np.array(shot, dtype=np.uint8)
        frame = Frame.from_bgra(bgra, origin=(monitor["left"], monitor["top"]))
        logger.debug("Captured %dx%d frame at %s", frame.width, frame.height, frame.bounds)
        return frame

    def release(self) -> None:
        """Nothing held between captures; kept for a uniform source interface."""


class ImageFileSource:
    """Replays a single image or a directory of images as frames.

    Each ``capture()`` returns the next image in sorted order, wrapping
    around at the end so the poll loop can run indefinitely on a fixed
    set of recordings.

    Usage:
        source = ImageFileSource("recordings/")
        frame = source.capture()
    """

    def __init__(self, source: Union[str, Path]) -> None:
        """Resolve and validate the image path(s).

        Raises:
            FileNotFoundError: If the path does not exist.
            ValueError: If the file type is unsupported or a directory
                        holds no images.
        """
        # Relative paths resolve against the working directory
        path = Path(source).resolve()

        if path.is_file():
            if path.suffix.lower() not in _IMAGE_EXTENSIONS:
                raise ValueError(
                    f"Unrecognized file extension: '{path.suffix}' for source '{path}'. "
                    f"Supported images: {_IMAGE_EXTENSIONS}."
                )
            self._paths: List[str] = [str(path)]
        elif path.is_dir():
            self._paths = sorted(
                str(p) for p in path.iterdir()
                if p.suffix.lower() in _IMAGE_EXTENSIONS
            )
            if not self._paths:
                raise ValueError(
                    f"No image files found in directory: '{path}'. "
                    f"Supported extensions: {_IMAGE_EXTENSIONS}."
                )
        else:
            raise FileNotFoundError(
                f"Capture source not found: '{source}'. "
                f"Use 'screen' or a valid image file or directory."
            )

        self._index = 0
        logger.info("ImageFileSource initialized: %d image(s) from %s", len(self._paths), path)

    def capture(self) -> Frame:
        """Read the next image.

        Raises:
            CaptureError: If the file cannot be decoded.
        """
        path = self._paths[self._index]
        self._index = (self._index + 1) % len(self._paths)

        # ANYDEPTH keeps 16-bit PNGs; Frame normalizes them to 8 bits
        bgr = cv2.imread(path, cv2.IMREAD_COLOR | cv2.IMREAD_ANYDEPTH)
        if bgr is None:
            raise CaptureError(f"unreadable image: {path}")

        return Frame.from_array(bgr[:, :, ::-1])

    def release(self) -> None:
        """Nothing to release; files are opened per capture."""


def open_source(config: CaptureConfig) -> Union[ScreenCapturer, ImageFileSource]:
    """Build the frame source named by ``config.source``."""
    source = config.source.strip()
    if source.lower() == "screen":
        return ScreenCapturer(monitor_index=config.monitor_index, timeout_s=config.timeout_s)
    return ImageFileSource(os.path.expanduser(source))
