from .host_collector import HostCollector
from .log_reader import read_range, read_tail

__all__ = [
    "HostCollector",
    "read_range",
    "read_tail",
]
