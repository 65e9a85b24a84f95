from __future__ import annotations

from monitor_api.engine.clock import Clock, system_clock
from monitor_api.models.metrics import MetricsSnapshot


class MetricsCache:
    """Single-slot TTL cache for the latest metrics snapshot.

    Metrics are host-global, so there is one entry for every caller. No lock:
    two overlapping misses simply both recompute and the later ``put`` wins.
    """

    def __init__(self, ttl: float = 2.5, clock: Clock = system_clock) -> None:
        self.ttl = ttl
        self._clock = clock
        self._snapshot: MetricsSnapshot | None = None
        self._stored_at: float = 0.0

    def get(self) -> MetricsSnapshot | None:
        """Return the cached snapshot while it is fresh, else ``None``."""
        if self._snapshot is None:
            return None
        if self._clock() - self._stored_at >= self.ttl:
            return None
        return self._snapshot

    def put(self, snapshot: MetricsSnapshot) -> None:
        self._snapshot = snapshot
        self._stored_at = self._clock()
