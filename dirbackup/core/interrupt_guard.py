from __future__ import annotations

import logging
import signal
from pathlib import Path
from types import FrameType
from typing import Any

logger = logging.getLogger(__name__)

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class InterruptGuard:
    """Remove the in-progress archive when the run is interrupted.

    Installed for the whole run. On SIGINT/SIGTERM the tracked path (if any)
    is deleted and the process exits with status 1. Signal handlers can only
    be installed from the main thread.
    """

    def __init__(self) -> None:
        self._current: Path | None = None
        self._previous: dict[int, Any] = {}

    @property
    def current(self) -> Path | None:
        return self._current

    def track(self, path: Path) -> None:
        self._current = path

    def clear(self) -> None:
        self._current = None

    def cleanup(self) -> None:
        if self._current is None:
            return
        try:
            self._current.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            logger.error("Could not remove incomplete archive %s: %s", self._current, exc)
            return
        logger.info("Removed incomplete archive %s", self._current)

    def install(self) -> None:
        for signum in HANDLED_SIGNALS:
            self._previous[signum] = signal.signal(signum, self._handle_signal)

    def uninstall(self) -> None:
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)
        self._previous.clear()

    def __enter__(self) -> InterruptGuard:
        self.install()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.uninstall()

    def _handle_signal(self, signum: int, frame: FrameType | None) -> None:
        logger.warning("Received %s, shutting down...", signal.Signals(signum).name)
        self.cleanup()
        raise SystemExit(1)
