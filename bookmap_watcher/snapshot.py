"""
Snapshot persistence.

Encodes a Frame as PNG and writes it to a fixed path that is overwritten
every cycle. The same PNG bytes are what the classification service
receives.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import cv2

from bookmap_watcher.errors import SnapshotWriteError
from bookmap_watcher.frame import Frame

logger = logging.getLogger(__name__)


def encode_png(frame: Frame) -> bytes:
    """Encode a frame as PNG bytes.

    Raises:
        SnapshotWriteError: If OpenCV refuses to encode the image.
    """
    try:
        ok, buf = cv2.imencode(".png", frame.to_bgr())
    except cv2.error as e:
        raise SnapshotWriteError(f"failed to encode image: {e}") from e
    if not ok:
        raise SnapshotWriteError("failed to encode image")
    return buf.tobytes()


def resolve_snapshot_path(path: Union[str, Path]) -> Path:
    """Resolve a relative snapshot path against the working directory."""
    resolved = Path(path)
    if not resolved.is_absolute():
        resolved = Path.cwd() / resolved
    return resolved


def write_snapshot(frame: Frame, path: Union[str, Path], png: Optional[bytes] = None) -> Path:
    """Write ``frame`` as PNG to ``path``, replacing any previous snapshot.

    Args:
        frame: Frame to persist.
        path: Target file. Relative paths resolve against the working directory.
        png: Already encoded bytes for ``frame``, to avoid encoding twice.

    Returns:
        The resolved path written.

    Raises:
        SnapshotWriteError: If encoding or writing fails.
    """
    target = resolve_snapshot_path(path)
    if png is None:
        png = encode_png(frame)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(png)
    except OSError as e:
        raise SnapshotWriteError(f"failed to write {target}: {e}") from e

    logger.info("Image saved to %s", target)
    return target
