from .log_service import LogService
from .metrics_service import MetricsService

__all__ = [
    "LogService",
    "MetricsService",
]
