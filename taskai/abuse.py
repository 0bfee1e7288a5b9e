from __future__ import annotations

import time
import threading
from collections import deque
from dataclasses import dataclass

from taskai.settings import settings


@dataclass
class BlockResult:
    blocked: bool
    retry_after: int


class SignInFailureTracker:
    """Counts failed sign-ins per email and blocks the email for a cooldown."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._failures: dict[str, deque[float]] = {}
        self._blocked_until: dict[str, float] = {}

    def check(self, email: str) -> BlockResult:
        now = time.monotonic()
        with self._lock:
            until = self._blocked_until.get(email)
            if until is None:
                return BlockResult(False, 0)
            if now < until:
                return BlockResult(True, max(1, int(until - now)))
            del self._blocked_until[email]
        return BlockResult(False, 0)

    def record_failure(self, email: str) -> None:
        now = time.monotonic()
        with self._lock:
            bucket = self._failures.setdefault(email, deque())
            bucket.append(now)
            while bucket and now - bucket[0] > settings.AUTH_FAIL_WINDOW_SEC:
                bucket.popleft()
            if len(bucket) >= settings.AUTH_FAIL_MAX:
                self._blocked_until[email] = now + settings.AUTH_BLOCK_SEC
                self._failures.pop(email, None)

    def clear(self, email: str) -> None:
        with self._lock:
            self._failures.pop(email, None)
            self._blocked_until.pop(email, None)


_tracker: SignInFailureTracker | None = None


def get_sign_in_tracker() -> SignInFailureTracker:
    global _tracker
    if _tracker is None:
        _tracker = SignInFailureTracker()
    return _tracker


def reset_sign_in_tracker() -> None:
    global _tracker
    _tracker = None
