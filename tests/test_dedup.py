"""
tests/test_dedup.py — DedupWindow Tests
=========================================

A user marked at t is suppressed on [t, t + timeout) and free from
t + timeout on.
"""

from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from conftest import at

from hello_there.engine.dedup import DedupWindow

TIMEOUT = timedelta(minutes=5)


class TestWindowEdges:
    def test_unknown_user_not_suppressed(self):
        assert not DedupWindow(TIMEOUT).is_suppressed(1, at(12))

    @pytest.mark.parametrize("offset", [
        timedelta(0),
        timedelta(seconds=1),
        timedelta(minutes=2),
        TIMEOUT - timedelta(microseconds=1),
    ])
    def test_suppressed_inside_window(self, offset):
        window = DedupWindow(TIMEOUT)
        window.mark_notified(1, at(12))
        assert window.is_suppressed(1, at(12) + offset)

    @pytest.mark.parametrize("offset", [TIMEOUT, TIMEOUT + timedelta(seconds=1), timedelta(hours=3)])
    def test_free_from_timeout_on(self, offset):
        window = DedupWindow(TIMEOUT)
        window.mark_notified(1, at(12))
        assert not window.is_suppressed(1, at(12) + offset)

    def test_expired_entry_is_dropped(self):
        window = DedupWindow(TIMEOUT)
        window.mark_notified(1, at(12))
        window.is_suppressed(1, at(13))
        assert len(window) == 0

    def test_users_are_independent(self):
        window = DedupWindow(TIMEOUT)
        window.mark_notified(1, at(12))
        assert window.is_suppressed(1, at(12, 1))
        assert not window.is_suppressed(2, at(12, 1))

    def test_remark_restarts_window(self):
        window = DedupWindow(TIMEOUT)
        window.mark_notified(1, at(12))
        window.mark_notified(1, at(12, 4))
        assert window.is_suppressed(1, at(12, 8))

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValueError):
            DedupWindow(timedelta(0))


class TestClaimRelease:
    def test_claim_once_per_window(self):
        window = DedupWindow(TIMEOUT)
        assert window.claim(1, at(12))
        assert not window.claim(1, at(12, 2))
        assert window.claim(1, at(12, 5))

    def test_release_reopens(self):
        window = DedupWindow(TIMEOUT)
        window.claim(1, at(12))
        window.release(1)
        assert not window.is_suppressed(1, at(12))
        window.release(1)  # releasing twice is harmless

    def test_concurrent_claims_single_winner(self):
        window = DedupWindow(TIMEOUT)
        results: list[bool] = []
        lock = threading.Lock()
        barrier = threading.Barrier(16)

        def worker():
            barrier.wait()
            won = window.claim(42, at(12))
            with lock:
                results.append(won)

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1


class TestPurge:
    def test_purge_removes_only_expired(self):
        window = DedupWindow(TIMEOUT)
        window.mark_notified(1, at(12))
        window.mark_notified(2, at(12, 4))
        assert window.purge(at(12, 6)) == 1
        assert len(window) == 1
        assert window.is_suppressed(2, at(12, 6))
