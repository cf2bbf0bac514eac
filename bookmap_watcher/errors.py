"""
Error taxonomy for the watcher.

Every fallible collaborator raises one of these. The poll controller is
the only consumer that catches them, logs, and moves on to the next tick.
"""


class WatcherError(Exception):
    """Base class for all recoverable per-cycle failures."""


class CaptureError(WatcherError):
    """No display is available or a frame could not be acquired."""


class SnapshotWriteError(WatcherError):
    """The snapshot image could not be encoded or written."""


class ClassificationServiceError(WatcherError):
    """The classification service call failed or returned garbage."""


class NotifyError(WatcherError):
    """A desktop notification or beep could not be delivered."""
