from __future__ import annotations

import hmac
import ipaddress
import logging

from monitor_api.errors import ServiceUnavailable, Unauthorized
from monitor_api.models.auth import Credentials

logger = logging.getLogger(__name__)


def is_loopback(identity: str) -> bool:
    try:
        addr = ipaddress.ip_address(identity)
    except ValueError:
        return False
    if isinstance(addr, ipaddress.IPv6Address) and addr.ipv4_mapped is not None:
        addr = addr.ipv4_mapped
    return addr.is_loopback


class Authorizer:
    """Decides whether a caller may read the API.

    The bypass paths are separate predicates so each one can be tested and
    reasoned about on its own.
    """

    def __init__(
        self,
        api_token: str | None = None,
        trusted_identity_header: str | None = None,
        dev_mode: bool = False,
    ) -> None:
        self.api_token = api_token or None
        self.trusted_identity_header = trusted_identity_header or None
        self.dev_mode = dev_mode

    # ── predicates ──────────────────────────────────────

    def misconfigured(self) -> bool:
        return self.api_token is None and not self.dev_mode

    def trusted_bypass(self, credentials: Credentials) -> bool:
        return self.trusted_identity_header is not None and bool(credentials.trusted_identity)

    def dev_loopback_bypass(self, identity: str) -> bool:
        return self.dev_mode and is_loopback(identity)

    def token_matches(self, credentials: Credentials) -> bool:
        if self.api_token is None or not credentials.token:
            return False
        return hmac.compare_digest(credentials.token.encode(), self.api_token.encode())

    # ── decision ────────────────────────────────────────

    def authorize(self, identity: str, credentials: Credentials) -> None:
        if self.misconfigured():
            logger.error("Rejecting request from %s: no API token configured", identity)
            raise ServiceUnavailable()
        if self.trusted_bypass(credentials) or self.dev_loopback_bypass(identity):
            return
        if self.token_matches(credentials):
            return
        logger.warning("Unauthorized request from %s", identity)
        raise Unauthorized()
