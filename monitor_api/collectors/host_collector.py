from __future__ import annotations

import asyncio
import logging

import psutil

from monitor_api.engine.clock import Clock, system_clock, to_millis
from monitor_api.models.metrics import MetricsSnapshot

logger = logging.getLogger(__name__)

ROOT_MOUNT = "/"


class HostCollector:
    """Reads CPU, memory, disk and uptime for the local host via psutil.

    The psutil calls block, so each one runs in a worker thread and the four
    reads are awaited together.
    """

    def __init__(self, clock: Clock = system_clock) -> None:
        self._clock = clock
        # First non-blocking cpu_percent() call always returns 0.0; prime it.
        psutil.cpu_percent(interval=None)

    async def collect(self) -> MetricsSnapshot:
        (cpu_load, cpu_cores), memory, disk, boot_time = await asyncio.gather(
            asyncio.to_thread(self._read_cpu),
            asyncio.to_thread(psutil.virtual_memory),
            asyncio.to_thread(self._read_disk),
            asyncio.to_thread(psutil.boot_time),
        )
        now = self._clock()
        disk_total, disk_used, disk_percent = disk

        return MetricsSnapshot(
            cpu_load=cpu_load,
            cpu_cores=cpu_cores,
            memory_total_bytes=memory.total,
            memory_available_bytes=memory.available,
            disk_total_bytes=disk_total,
            disk_used_bytes=disk_used,
            disk_used_percent=disk_percent,
            uptime_seconds=max(0.0, now - boot_time),
            computed_at_millis=to_millis(now),
        )

    @staticmethod
    def _read_cpu() -> tuple[float, int]:
        return psutil.cpu_percent(interval=None), psutil.cpu_count() or 0

    @staticmethod
    def _read_disk() -> tuple[int, int, float]:
        """Usage of the root mount, else the first reported filesystem.

        ``/`` is read directly: in containers it is often an overlay mount
        that ``disk_partitions(all=False)`` leaves out.
        """
        try:
            usage = psutil.disk_usage(ROOT_MOUNT)
        except OSError:
            partitions = psutil.disk_partitions(all=False)
            if not partitions:
                logger.debug("No readable root mount or filesystems, disk usage is zero")
                return 0, 0, 0.0
            logger.debug("Root mount unreadable, using %s", partitions[0].mountpoint)
            usage = psutil.disk_usage(partitions[0].mountpoint)
        return usage.total, usage.used, usage.percent
