from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Credentials:
    """What a caller presented to prove it may use the API."""

    token: str | None = None
    trusted_identity: str | None = None
