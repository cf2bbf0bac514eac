"""
Region-of-interest selection.

Cuts a fixed fraction off every side of the frame so menu bars, docks
and other window chrome never take part in detection.
"""

from bookmap_watcher.geometry import Rect


def central_roi(bounds: Rect, margin: float) -> Rect:
    """Shrink ``bounds`` by ``floor(width * margin)`` left/right and
    ``floor(height * margin)`` top/bottom.

    A margin of 0.5 or more can produce an empty (or inverted) rectangle.
    That is not an error: every scan over an empty ROI simply finds
    nothing.
    """
    margin_x = int(bounds.width * margin)
    margin_y = int(bounds.height * margin)

    return Rect(
        bounds.min_x + margin_x,
        bounds.min_y + margin_y,
        bounds.max_x - margin_x,
        bounds.max_y - margin_y,
    )
