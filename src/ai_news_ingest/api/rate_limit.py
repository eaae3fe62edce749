from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

from fastapi import Request

DEFAULT_RATE_LIMIT_MESSAGE = "Rate limit exceeded. Try again later."


def resolve_request_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


@dataclass
class _Bucket:
    count: int
    start: float


class IpRateLimiter:
    """IP별 고정 윈도우 카운터 (메모리 내, 프로세스 단위)."""

    def __init__(
        self,
        *,
        window_sec: float,
        max_requests: int,
        error_message: str = DEFAULT_RATE_LIMIT_MESSAGE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window_sec = window_sec
        self.max_requests = max_requests
        self.error_message = error_message
        self._clock = clock
        self._buckets: dict[str, _Bucket] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> bool:
        """요청 1회를 기록하고 허용 여부를 반환."""
        now = self._clock()
        with self._lock:
            bucket = self._buckets.get(key)
            if bucket is None or now - bucket.start >= self.window_sec:
                bucket = _Bucket(count=0, start=now)
                self._buckets[key] = bucket
            bucket.count += 1
            return bucket.count <= self.max_requests

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()


def admin_rate_limiter() -> IpRateLimiter:
    return IpRateLimiter(window_sec=60, max_requests=5)


def newsletter_rate_limiter() -> IpRateLimiter:
    return IpRateLimiter(
        window_sec=5 * 60,
        max_requests=3,
        error_message="Please wait before trying again.",
    )
