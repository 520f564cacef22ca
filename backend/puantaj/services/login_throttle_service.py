"""
Login Throttling Service

WHY: Prevent brute-force password attacks by limiting failed login attempts.
After too many failures, the identifier is temporarily locked.

DESIGN:
- LoginThrottle is an explicit object created once per app in create_app
  and stored in app.extensions["login_throttle"]; there is no module-level
  counter map.
- Tracks failed attempts per email (case-insensitive) in memory
- Lockout after max_failed_attempts failures within the lockout window
- Clears failed count on successful login
- State is per-process; a restart forgets all counters
"""

from __future__ import annotations

import threading
from collections import defaultdict, deque
from datetime import datetime, timedelta

from flask import current_app

from puantaj.time_utils import utcnow


# Configuration defaults
MAX_FAILED_ATTEMPTS = 10  # Lock after 10 failed attempts
LOCKOUT_WINDOW = timedelta(minutes=15)  # Within 15 minutes
LOCKOUT_DURATION = timedelta(minutes=15)  # Lockout for 15 minutes


class LoginThrottle:
    def __init__(
        self,
        max_failed_attempts: int = MAX_FAILED_ATTEMPTS,
        lockout_window: timedelta = LOCKOUT_WINDOW,
        lockout_duration: timedelta = LOCKOUT_DURATION,
    ):
        self.max_failed_attempts = max_failed_attempts
        self.lockout_window = lockout_window
        self.lockout_duration = lockout_duration
        self._failures: dict[str, deque[datetime]] = defaultdict(deque)
        self._lock = threading.Lock()

    @staticmethod
    def _key(identifier: str) -> str:
        return (identifier or "").strip().lower()

    def _prune(self, key: str, now: datetime) -> deque[datetime]:
        attempts = self._failures[key]
        cutoff = now - self.lockout_window
        while attempts and attempts[0] < cutoff:
            attempts.popleft()
        if not attempts:
            self._failures.pop(key, None)
        return attempts

    def get_recent_failed_attempts(self, identifier: str) -> int:
        """Count failed attempts for an identifier within the lockout window."""
        with self._lock:
            return len(self._prune(self._key(identifier), utcnow()))

    def is_account_locked(self, identifier: str) -> tuple[bool, int | None]:
        """
        Check if an identifier is currently locked due to too many failed attempts.

        Returns:
        - (True, seconds_remaining) if locked
        - (False, None) if not locked
        """
        now = utcnow()
        with self._lock:
            attempts = self._prune(self._key(identifier), now)
            if len(attempts) < self.max_failed_attempts:
                return False, None
            lockout_end = attempts[-1] + self.lockout_duration
        if now < lockout_end:
            return True, int((lockout_end - now).total_seconds())
        return False, None

    def record_failed_attempt(self, identifier: str) -> int:
        """
        Record a failed login attempt.

        Returns the total number of recent failed attempts.
        """
        now = utcnow()
        key = self._key(identifier)
        with self._lock:
            attempts = self._prune(key, now)
            attempts.append(now)
            self._failures[key] = attempts
            return len(attempts)

    def record_successful_login(self, identifier: str) -> None:
        with self._lock:
            self._failures.pop(self._key(identifier), None)

    def get_lockout_status(self, identifier: str) -> dict:
        failed_count = self.get_recent_failed_attempts(identifier)
        is_locked, seconds_remaining = self.is_account_locked(identifier)

        return {
            "locked": is_locked,
            "failed_attempts": failed_count,
            "max_attempts": self.max_failed_attempts,
            "seconds_until_unlock": seconds_remaining,
            "lockout_window_minutes": int(self.lockout_window.total_seconds() / 60),
            "lockout_duration_minutes": int(self.lockout_duration.total_seconds() / 60),
        }


def get_throttle() -> LoginThrottle:
    """The LoginThrottle bound to the current app."""
    return current_app.extensions["login_throttle"]
