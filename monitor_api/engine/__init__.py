from .admission import Admission
from .authorizer import Authorizer
from .metrics_cache import MetricsCache
from .rate_limiter import RateLimiter, RateLimitRecord
from .sweeper import PeriodicSweeper

__all__ = [
    "Admission",
    "Authorizer",
    "MetricsCache",
    "PeriodicSweeper",
    "RateLimiter",
    "RateLimitRecord",
]
