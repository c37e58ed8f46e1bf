# fence_quote/services/rate_limit.py
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from fastapi import Request

from fence_quote.core.config import settings
from fence_quote.core.logging import get_structlog_logger

logger = get_structlog_logger(__name__)


@dataclass
class RateRecord:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """In-memory fixed-window rate limiter keyed by client identifier.

    The first request of a key opens a window of ``window_seconds``; every
    request inside it increments the count, and requests beyond
    ``max_requests`` are refused until the window has passed. Expired records
    are purged whenever the table grows past ``sweep_threshold`` keys.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float = 600,
        sweep_threshold: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.sweep_threshold = sweep_threshold
        self._clock = clock
        self._records: Dict[str, RateRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def admit(self, key: Optional[str]) -> bool:
        key = key or "unknown"
        now = self._clock()

        if len(self._records) > self.sweep_threshold:
            self._sweep(now)

        record = self._records.get(key)
        if record is None or now > record.reset_at:
            self._records[key] = RateRecord(count=1, reset_at=now + self.window_seconds)
            return True

        record.count += 1
        return record.count <= self.max_requests

    def stats(self, key: str) -> Dict:
        """Get rate limit statistics for a client key."""
        now = self._clock()
        record = self._records.get(key)
        if record is None or now > record.reset_at:
            return {
                "client_id": key,
                "current_count": 0,
                "limit": self.max_requests,
                "remaining": self.max_requests,
                "reset_in": 0,
            }
        return {
            "client_id": key,
            "current_count": record.count,
            "limit": self.max_requests,
            "remaining": max(0, self.max_requests - record.count),
            "reset_in": record.reset_at - now,
        }

    def reset(self) -> None:
        self._records.clear()

    def _sweep(self, now: float) -> None:
        expired = [key for key, record in self._records.items() if now > record.reset_at]
        for key in expired:
            del self._records[key]
        logger.debug("rate_limit.swept", removed=len(expired), remaining=len(self._records))


def get_client_id(request: Request) -> str:
    """Client identifier used as the rate limit key."""
    forwarded_for = request.headers.get("X-Forwarded-For", "")
    client_ip = forwarded_for.split(",")[0].strip()
    if client_ip:
        return client_ip

    real_ip = request.headers.get("X-Real-IP", "").strip()
    if real_ip:
        return real_ip

    if request.client and request.client.host:
        return request.client.host.strip() or "unknown"
    return "unknown"


_limiter: Optional[FixedWindowRateLimiter] = None


def get_rate_limiter() -> FixedWindowRateLimiter:
    """FastAPI dependency returning the process-wide lead rate limiter."""
    global _limiter
    if _limiter is None:
        _limiter = FixedWindowRateLimiter(
            max_requests=settings.lead_rate_limit_max,
            window_seconds=settings.lead_rate_window_seconds,
            sweep_threshold=settings.lead_rate_sweep_threshold,
        )
    return _limiter
