# Overview: Background sweeper that deletes expired session rows on a fixed interval.

from __future__ import annotations

import logging
import threading
from typing import Optional

from flask import Flask

from . import session_service


logger = logging.getLogger(__name__)


class SessionSweeper:
    """
    Process-scoped expiry sweeper.

    Created by create_app and stored in app.extensions["session_sweeper"];
    nothing about it lives at module level, so tests and CLI commands can
    build apps without a timer running, and shutdown can stop() it.
    """

    def __init__(self, app: Flask, interval_seconds: int):
        self.app = app
        self.interval_seconds = int(interval_seconds)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def enabled(self) -> bool:
        return self.interval_seconds > 0

    @property
    def running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def start(self) -> None:
        if not self.enabled or self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="session-sweeper", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def sweep_once(self) -> int:
        with self.app.app_context():
            deleted = session_service.cleanup_expired_sessions()
        if deleted:
            logger.info("Session sweep removed %d expired sessions", deleted)
        return deleted

    def _run(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            try:
                self.sweep_once()
            except Exception:
                logger.exception("Session sweep failed")
