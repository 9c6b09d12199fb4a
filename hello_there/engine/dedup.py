"""
hello_there.engine.dedup — Notification Suppression Window
============================================================

Once a member has been announced, further announcements for them are
suppressed until ``timeout`` has elapsed.  One window per user across all
guilds.

Expiry is lazy: entries are compared against ``now`` on every read and
dropped when stale, so no timer is needed and an expired entry is never
reported as suppressed.
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta

from hello_there.constants import DEFAULT_DEDUP_TIMEOUT_SECONDS


class DedupWindow:
    """Thread-safe ``user_id → expiry`` map.

    A user is suppressed for ``now`` in ``[marked_at, marked_at + timeout)``.
    """

    def __init__(self, timeout: timedelta = timedelta(seconds=DEFAULT_DEDUP_TIMEOUT_SECONDS)) -> None:
        if timeout <= timedelta(0):
            raise ValueError("dedup timeout must be positive")
        self.timeout = timeout
        self._expiry: dict[int, datetime] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._expiry)

    def _active(self, user_id: int, now: datetime) -> bool:
        # Caller holds the lock.
        expiry = self._expiry.get(user_id)
        if expiry is None:
            return False
        if now >= expiry:
            del self._expiry[user_id]
            return False
        return True

    def is_suppressed(self, user_id: int, now: datetime) -> bool:
        """Return True if *user_id* was announced less than ``timeout`` ago."""
        with self._lock:
            return self._active(user_id, now)

    def mark_notified(self, user_id: int, now: datetime) -> None:
        """Start (or restart) the window for *user_id* at *now*."""
        with self._lock:
            self._expiry[user_id] = now + self.timeout

    def claim(self, user_id: int, now: datetime) -> bool:
        """Atomically mark *user_id* unless already suppressed.

        Returns True if the caller won the slot and should announce.
        """
        with self._lock:
            if self._active(user_id, now):
                return False
            self._expiry[user_id] = now + self.timeout
            return True

    def release(self, user_id: int) -> None:
        """Undo a :meth:`claim` whose announcement could not be delivered."""
        with self._lock:
            self._expiry.pop(user_id, None)

    def purge(self, now: datetime) -> int:
        """Drop every expired entry.  Returns how many were removed."""
        with self._lock:
            stale = [uid for uid, expiry in self._expiry.items() if now >= expiry]
            for uid in stale:
                del self._expiry[uid]
            return len(stale)
