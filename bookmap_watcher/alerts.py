"""
Alert delivery.

Responsibility:
    Turn a confirmed line + marker detection into a desktop notification
    and a beep, without blocking the poll loop.

Concurrency:
    AlertDispatcher.dispatch() starts a daemon thread and returns at once.
    There is no join point: delivery may still be running when the next
    cycle starts, and its failures are only visible in this module's log.

Platform notes:
    - macOS: osascript 'display notification'.
    - Linux: notify-send (libnotify).
    - Windows: winsound.Beep for the tone; notifications are logged only.
    - Anywhere else the beep falls back to the terminal bell.
"""

import logging
import platform
import shutil
import subprocess
import sys
import threading
from typing import Optional

from bookmap_watcher.config import AlertConfig
from bookmap_watcher.errors import NotifyError

logger = logging.getLogger(__name__)


def _applescript_quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


class DesktopNotifier:
    """Best-effort desktop notification sink.

    Both calls raise NotifyError on failure; callers decide whether to
    log or propagate.
    """

    def __init__(self, os_type: Optional[str] = None) -> None:
        self._os_type = os_type or platform.system()

    def notify(self, title: str, message: str) -> None:
        """Show a desktop notification."""
        if self._os_type == "Darwin":
            script = (
                f"display notification {_applescript_quote(message)} "
                f"with title {_applescript_quote(title)}"
            )
            self._run(["osascript", "-e", script])
        elif self._os_type == "Linux":
            if shutil.which("notify-send") is None:
                raise NotifyError("notify-send not found; install libnotify")
            self._run(["notify-send", title, message])
        else:
            logger.warning("Desktop notifications unsupported on %s: %s - %s",
                           self._os_type, title, message)

    def beep(self, frequency_hz: int, duration_ms: int) -> None:
        """Play a tone, or ring the terminal bell where tones are unavailable."""
        if self._os_type == "Windows":
            try:
                import winsound
                winsound.Beep(frequency_hz, duration_ms)
            except (ImportError, RuntimeError) as e:
                raise NotifyError(f"beep failed: {e}") from e
            return

        if self._os_type == "Darwin":
            self._run(["osascript", "-e", "beep"])
            return

        try:
            sys.stdout.write("\a")
            sys.stdout.flush()
        except OSError as e:
            raise NotifyError(f"beep failed: {e}") from e

    @staticmethod
    def _run(cmd) -> None:
        try:
            subprocess.run(cmd, check=True, capture_output=True, timeout=10)
        except (OSError, subprocess.SubprocessError) as e:
            raise NotifyError(f"{cmd[0]} failed: {e}") from e


class AlertDispatcher:
    """Fire-and-forget alert delivery on a detached thread.

    Usage:
        dispatcher = AlertDispatcher(DesktopNotifier(), config.alert)
        dispatcher.dispatch(line_y=412)
    """

    def __init__(self, notifier, config: AlertConfig) -> None:
        self._notifier = notifier
        self._config = config
        self._threads = []

    def dispatch(self, line_y: int) -> threading.Thread:
        """Start alert delivery in the background and return immediately.

        The thread handle is returned for observability only; the poll
        controller never waits on it.
        """
        thread = threading.Thread(
            target=self.deliver,
            args=(line_y,),
            name=f"alert-y{line_y}",
            daemon=True,
        )
        thread.start()
        self._threads = [t for t in self._threads if t.is_alive()] + [thread]
        return thread

    def wait_pending(self, timeout: Optional[float] = None) -> None:
        """Join alert threads still running. Only used at process shutdown."""
        for thread in self._threads:
            thread.join(timeout)
        self._threads = [t for t in self._threads if t.is_alive()]

    def deliver(self, line_y: int) -> None:
        """Notify, beep and log. Runs on the alert thread; never raises."""
        title = self._config.title
        message = f"Price bubble reached red line (Y={line_y})"

        try:
            self._notifier.notify(title, message)
        except NotifyError as e:
            logger.warning("notify error: %s", e)
        except Exception:
            logger.exception("Unexpected error while sending notification")

        try:
            self._notifier.beep(self._config.beep_frequency_hz, self._config.beep_duration_ms)
        except NotifyError as e:
            logger.warning("beep error: %s", e)
        except Exception:
            logger.exception("Unexpected error while beeping")

        logger.info("ALERT: %s", message)
