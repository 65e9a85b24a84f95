from __future__ import annotations

import logging
from typing import Protocol

from monitor_api.engine.admission import Admission
from monitor_api.engine.metrics_cache import MetricsCache
from monitor_api.errors import MetricsUnavailable
from monitor_api.models.auth import Credentials
from monitor_api.models.metrics import MetricsSnapshot

logger = logging.getLogger(__name__)


class SnapshotSource(Protocol):
    async def collect(self) -> MetricsSnapshot: ...


class MetricsService:
    """Serves host metrics, recomputing at most once per cache TTL."""

    def __init__(
        self,
        admission: Admission,
        cache: MetricsCache,
        collector: SnapshotSource,
    ) -> None:
        self.admission = admission
        self.cache = cache
        self.collector = collector

    async def get_metrics(self, identity: str, credentials: Credentials) -> MetricsSnapshot:
        self.admission.admit(identity, credentials)
        return await self.current()

    async def current(self) -> MetricsSnapshot:
        """Return the cached snapshot if fresh, otherwise gather a new one."""
        cached = self.cache.get()
        if cached is not None:
            return cached

        try:
            snapshot = await self.collector.collect()
        except Exception as exc:
            logger.exception("Failed to gather system metrics")
            raise MetricsUnavailable(detail=str(exc)) from exc

        self.cache.put(snapshot)
        return snapshot
