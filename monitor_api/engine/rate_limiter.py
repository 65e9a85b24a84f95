from __future__ import annotations

import logging
import math
from collections import OrderedDict

from monitor_api.engine.clock import Clock, system_clock
from monitor_api.errors import RateLimited

logger = logging.getLogger(__name__)


class RateLimitRecord:
    """Admission state for one client identity inside its current window."""

    __slots__ = ("identity", "count", "window_reset_at")

    def __init__(self, identity: str, window_reset_at: float) -> None:
        self.identity = identity
        self.count = 0
        self.window_reset_at = window_reset_at

    def expired(self, now: float) -> bool:
        return now >= self.window_reset_at


class RateLimiter:
    """Fixed-window request counter keyed by client identity.

    Records live in an ``OrderedDict`` ordered by when their window started,
    so the table can be size-bounded by evicting from the front.
    """

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: float = 60.0,
        max_clients: int = 10_000,
        clock: Clock = system_clock,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.max_clients = max_clients
        self._clock = clock
        self._records: OrderedDict[str, RateLimitRecord] = OrderedDict()

    def hit(self, identity: str) -> RateLimitRecord:
        """Count one request for ``identity``; raise ``RateLimited`` over quota."""
        now = self._clock()
        record = self._records.get(identity)

        if record is None:
            self._make_room()
            record = RateLimitRecord(identity, now + self.window_seconds)
            self._records[identity] = record
        elif record.expired(now):
            record.count = 0
            record.window_reset_at = now + self.window_seconds
            self._records.move_to_end(identity)

        record.count += 1
        if record.count > self.max_requests:
            retry_after = max(1, math.ceil(record.window_reset_at - now))
            logger.warning(
                "Rate limit exceeded for %s (%d requests, retry in %ds)",
                identity, record.count, retry_after,
            )
            raise RateLimited(retry_after)
        return record

    def sweep(self) -> int:
        """Drop every record whose window has fully elapsed. Returns the count removed."""
        now = self._clock()
        stale = [key for key, rec in self._records.items() if rec.expired(now)]
        for key in stale:
            del self._records[key]
        if stale:
            logger.debug("Swept %d idle rate-limit records", len(stale))
        return len(stale)

    def _make_room(self) -> None:
        if len(self._records) < self.max_clients:
            return
        self.sweep()
        while len(self._records) >= self.max_clients:
            evicted, _ = self._records.popitem(last=False)
            logger.warning("Rate-limit table full, evicting %s", evicted)

    # ── introspection ───────────────────────────────────

    def get(self, identity: str) -> RateLimitRecord | None:
        return self._records.get(identity)

    @property
    def tracked(self) -> int:
        return len(self._records)
