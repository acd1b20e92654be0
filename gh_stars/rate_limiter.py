"""Helpers for coordinating GitHub REST rate limits."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from .config import UTC
from .models import RateLimitInfo

LOGGER = logging.getLogger(__name__)


class RateLimiter:
    """Async request budget derived from the ``X-RateLimit-*`` headers.

    Each REST call costs one request. Until a response has been recorded
    there is no known budget and requests pass straight through.
    """

    def __init__(self, *, minimum_sleep: float = 0.05) -> None:
        self._lock = asyncio.Lock()
        self._info: RateLimitInfo | None = None
        self._minimum_sleep = max(minimum_sleep, 0.0)

    async def acquire(self) -> None:
        """Wait until the budget allows another request."""

        while True:
            async with self._lock:
                info = self._info
                if info is None:
                    return
                if info.remaining > 0:
                    info.remaining -= 1
                    return
                reset_at = info.reset_at

            delay = max((reset_at - datetime.now(tz=UTC)).total_seconds(), self._minimum_sleep)
            LOGGER.warning("GitHub rate limit exhausted; sleeping %.2fs until reset", delay)
            await asyncio.sleep(delay)
            async with self._lock:
                if self._info is info:
                    self._info = None

    async def record(self, info: RateLimitInfo) -> None:
        """Update the limiter with the headers of the latest response."""

        async with self._lock:
            # Concurrent responses may arrive out of order; keep the lowest budget
            # seen for the current reset window.
            current = self._info
            if current is not None and current.reset_at == info.reset_at and current.remaining < info.remaining:
                return
            self._info = RateLimitInfo(limit=info.limit, remaining=info.remaining, reset_at=info.reset_at)

    async def reset(self) -> None:
        """Clear cached rate limit information after a failed request."""

        async with self._lock:
            self._info = None

    async def remaining(self) -> int | None:
        async with self._lock:
            return self._info.remaining if self._info else None


__all__ = ["RateLimiter"]
