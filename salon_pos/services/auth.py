"""Admin PIN check.

The PIN stays a single shared 5-digit setting for compatibility with existing
databases; comparison is constant-time and repeated failures lock checking
for a while.
"""
from __future__ import annotations

import hmac
import logging
import threading
import time

from ..errors import TooManyAttempts
from .settings_store import get_setting

logger = logging.getLogger(__name__)


class PinGuard:
    def __init__(self, max_attempts: int = 5, lockout_seconds: float = 60.0, clock=time.monotonic):
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds
        self._clock = clock
        self._failures = 0
        self._locked_until = 0.0
        self._lock = threading.Lock()

    def check(self) -> None:
        with self._lock:
            remaining = self._locked_until - self._clock()
            if remaining > 0:
                raise TooManyAttempts(f"Too many wrong PIN attempts; try again in {int(remaining) + 1}s")

    def record(self, ok: bool) -> None:
        with self._lock:
            if ok:
                self._failures = 0
                return
            self._failures += 1
            if self._failures >= self.max_attempts:
                self._locked_until = self._clock() + self.lockout_seconds
                self._failures = 0
                logger.warning("Admin PIN locked for %.0fs after repeated failures", self.lockout_seconds)


def verify_admin_pin(store, pin, guard: PinGuard = None) -> bool:
    if guard is not None:
        guard.check()
    stored = get_setting(store, "admin_pin")
    ok = stored is not None and pin is not None and hmac.compare_digest(
        str(pin).strip().encode("utf-8"), stored.encode("utf-8")
    )
    if guard is not None:
        guard.record(ok)
    return ok
