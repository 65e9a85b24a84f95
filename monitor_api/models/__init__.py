from .auth import Credentials
from .logs import LogOrder, LogPage, LogPageResponse
from .metrics import MetricsResponse, MetricsSnapshot, format_uptime

__all__ = [
    "Credentials",
    "LogOrder",
    "LogPage",
    "LogPageResponse",
    "MetricsResponse",
    "MetricsSnapshot",
    "format_uptime",
]
