"""Per-user request quota for the authenticated API.

Every signed-in user gets `API_RATE_LIMIT_PER_MIN` requests per
`API_RATE_WINDOW_SEC`. With `REDIS_URL` set the count is shared by all API
processes; otherwise each process keeps its own table.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable

import redis

from taskai.settings import settings


@dataclass(frozen=True)
class QuotaDecision:
    allowed: bool
    retry_after: int = 0


class LocalRequestQuota:
    """Sliding window of request times per user id, held in memory.

    Users with no request inside the last window are dropped by a sweep that
    runs at most once per window, so the table only holds recent users.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._hits: dict[int, deque[float]] = {}
        self._lock = threading.Lock()
        self._next_sweep = 0.0

    def __len__(self) -> int:
        return len(self._hits)

    def check(self, user_id: int, limit: int, window_sec: int) -> QuotaDecision:
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                self._drop_idle_users(now, window_sec)
            hits = self._hits.setdefault(user_id, deque())
            while hits and now - hits[0] > window_sec:
                hits.popleft()
            if len(hits) >= limit:
                return QuotaDecision(False, max(1, int(window_sec - (now - hits[0]))))
            hits.append(now)
        return QuotaDecision(True)

    def _drop_idle_users(self, now: float, window_sec: int) -> None:
        idle = [uid for uid, hits in self._hits.items() if not hits or now - hits[-1] > window_sec]
        for uid in idle:
            del self._hits[uid]
        self._next_sweep = now + window_sec


class RedisRequestQuota:
    """Fixed window counter per user id; keys expire with their window."""

    def __init__(self, url: str) -> None:
        self._client = redis.Redis.from_url(url, decode_responses=True)

    def check(self, user_id: int, limit: int, window_sec: int) -> QuotaDecision:
        now = int(time.time())
        key = f"taskai:quota:user:{user_id}:{now // window_sec}"
        pipe = self._client.pipeline()
        pipe.incr(key)
        pipe.expire(key, window_sec + 1)
        count, _ = pipe.execute()
        if int(count) > limit:
            return QuotaDecision(False, max(1, window_sec - (now % window_sec)))
        return QuotaDecision(True)


_quota: LocalRequestQuota | RedisRequestQuota | None = None


def get_request_quota() -> LocalRequestQuota | RedisRequestQuota:
    global _quota
    if _quota is None:
        _quota = RedisRequestQuota(settings.REDIS_URL) if settings.REDIS_URL else LocalRequestQuota()
    return _quota


def reset_request_quota() -> None:
    global _quota
    _quota = None
