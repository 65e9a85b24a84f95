from __future__ import annotations

from monitor_api.engine.authorizer import Authorizer
from monitor_api.engine.rate_limiter import RateLimiter
from monitor_api.models.auth import Credentials


class Admission:
    """Per-request gate: rate check first, then authorization."""

    def __init__(self, rate_limiter: RateLimiter, authorizer: Authorizer) -> None:
        self.rate_limiter = rate_limiter
        self.authorizer = authorizer

    def admit(self, identity: str, credentials: Credentials) -> None:
        self.rate_limiter.hit(identity)
        self.authorizer.authorize(identity, credentials)
