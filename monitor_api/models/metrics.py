from __future__ import annotations

from pydantic import BaseModel, ConfigDict

GIB = 1024 ** 3


def format_uptime(seconds: float) -> str:
    """Render uptime as ``1d 2h 3m``, dropping leading zero units."""
    seconds = int(seconds)
    days = seconds // 86400
    hours = (seconds % 86400) // 3600
    minutes = (seconds % 3600) // 60

    if days > 0:
        return f"{days}d {hours}h {minutes}m"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def _to_gb(num_bytes: int) -> float:
    return round(num_bytes / GIB, 1)


class MetricsSnapshot(BaseModel):
    """One full-precision reading of host resources.

    Rounding happens only in the derived properties so the cached value keeps
    the raw numbers.
    """

    model_config = ConfigDict(frozen=True)

    cpu_load: float = 0.0
    cpu_cores: int = 0
    memory_total_bytes: int = 0
    memory_available_bytes: int = 0
    disk_total_bytes: int = 0
    disk_used_bytes: int = 0
    disk_used_percent: float = 0.0
    uptime_seconds: float = 0.0
    computed_at_millis: int = 0

    # ── derived presentation values ─────────────────────

    @property
    def memory_used_bytes(self) -> int:
        return self.memory_total_bytes - self.memory_available_bytes

    @property
    def cpu_percent(self) -> int:
        return round(self.cpu_load)

    @property
    def cpu_load_label(self) -> str:
        label = f"{self.cpu_load:.1f}%"
        if self.cpu_cores > 0:
            label += f" ({self.cpu_cores} cores)"
        return label

    @property
    def memory_percent(self) -> int:
        if self.memory_total_bytes <= 0:
            return 0
        return round(self.memory_used_bytes / self.memory_total_bytes * 100)

    @property
    def memory_used_gb(self) -> float:
        return _to_gb(self.memory_used_bytes)

    @property
    def memory_total_gb(self) -> float:
        return _to_gb(self.memory_total_bytes)

    @property
    def disk_percent(self) -> int:
        return round(self.disk_used_percent)

    @property
    def disk_used_gb(self) -> float:
        return _to_gb(self.disk_used_bytes)

    @property
    def disk_total_gb(self) -> float:
        return _to_gb(self.disk_total_bytes)

    @property
    def uptime_label(self) -> str:
        return format_uptime(self.uptime_seconds)


class MetricsResponse(BaseModel):
    """Wire shape of ``GET /api/metrics``."""

    cpu: int
    cpuLoad: str
    memory: int
    memoryUsed: float
    memoryTotal: float
    disk: int
    diskUsed: float
    diskTotal: float
    uptime: str
    timestamp: int

    @classmethod
    def from_snapshot(cls, snapshot: MetricsSnapshot) -> MetricsResponse:
        return cls(
            cpu=snapshot.cpu_percent,
            cpuLoad=snapshot.cpu_load_label,
            memory=snapshot.memory_percent,
            memoryUsed=snapshot.memory_used_gb,
            memoryTotal=snapshot.memory_total_gb,
            disk=snapshot.disk_percent,
            diskUsed=snapshot.disk_used_gb,
            diskTotal=snapshot.disk_total_gb,
            uptime=snapshot.uptime_label,
            timestamp=snapshot.computed_at_millis,
        )
