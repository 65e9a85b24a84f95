"""Async client for the monitor API.

Mirrors what the dashboard frontend does with the API: poll metrics at a
fixed interval into a bounded history for charts, and keep a log window
that grows toward the past by prepending older pages.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Any, Awaitable, Callable

import httpx

from monitor_api.errors import retryable_error_tags

logger = logging.getLogger(__name__)

DEFAULT_HISTORY = 60  # points kept per series
DEFAULT_POLL_INTERVAL = 3.0  # seconds
RETRYABLE_ERRORS = retryable_error_tags()


class ApiError(Exception):
    """Structured error returned by the API."""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str = "",
        retry_after: int | None = None,
    ) -> None:
        super().__init__(f"HTTP {status_code} {error}: {message}")
        self.status_code = status_code
        self.error = error
        self.message = message
        self.retry_after = retry_after

    @property
    def retryable(self) -> bool:
        return self.error in RETRYABLE_ERRORS


class MonitorClient:
    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["X-Api-Token"] = token
            headers["Authorization"] = f"Bearer {token}"
        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> MonitorClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def fetch_metrics(self) -> dict[str, Any]:
        return await self._get("/api/metrics")

    async def fetch_logs(
        self,
        source: str,
        offset: int | None = None,
        limit: int | None = None,
        order: str = "asc",
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"order": order}
        if offset is not None:
            params["offset"] = offset
        if limit is not None:
            params["limit"] = limit
        return await self._get(f"/api/logs/{source}", params=params)

    async def health(self) -> dict[str, Any]:
        return await self._get("/health")

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        resp = await self._http.get(path, params=params)
        if resp.is_success:
            return resp.json()

        try:
            body = resp.json()
        except ValueError:
            body = {}
        retry_after = body.get("retryAfter") or resp.headers.get("retry-after")
        raise ApiError(
            resp.status_code,
            body.get("error", "HTTPError"),
            body.get("message", resp.reason_phrase),
            retry_after=int(retry_after) if retry_after is not None else None,
        )


# ── metrics history ───────────────────────────────────


class MetricsHistory:
    """Last ``size`` readings of each chart series."""

    SERIES = ("cpu", "memory", "disk")

    def __init__(self, size: int = DEFAULT_HISTORY) -> None:
        self.size = size
        self.timestamps: deque[int] = deque(maxlen=size)
        self.series: dict[str, deque[int]] = {
            name: deque(maxlen=size) for name in self.SERIES
        }
        self.latest: dict[str, Any] | None = None

    def record(self, metrics: dict[str, Any]) -> None:
        # Cached responses repeat the previous timestamp; don't chart them twice.
        if self.timestamps and self.timestamps[-1] == metrics["timestamp"]:
            self.latest = metrics
            return
        self.timestamps.append(metrics["timestamp"])
        for name in self.SERIES:
            self.series[name].append(metrics[name])
        self.latest = metrics

    def __len__(self) -> int:
        return len(self.timestamps)


async def poll_metrics(
    client: MonitorClient,
    history: MetricsHistory,
    interval: float = DEFAULT_POLL_INTERVAL,
    on_update: Callable[[dict[str, Any]], Awaitable[None] | None] | None = None,
    max_polls: int | None = None,
) -> None:
    """Poll ``/api/metrics`` every ``interval`` seconds until cancelled.

    Retryable errors are logged and polling continues, waiting out
    ``Retry-After`` when the server sends one. Other API errors propagate.
    """
    polls = 0
    while max_polls is None or polls < max_polls:
        polls += 1
        delay = interval
        try:
            metrics = await client.fetch_metrics()
        except ApiError as exc:
            if not exc.retryable:
                raise
            logger.warning("Metrics poll failed: %s", exc)
            if exc.retry_after:
                delay = max(interval, float(exc.retry_after))
        else:
            history.record(metrics)
            if on_update is not None:
                result = on_update(metrics)
                if asyncio.iscoroutine(result):
                    await result
        if max_polls is None or polls < max_polls:
            await asyncio.sleep(delay)


# ── log window ────────────────────────────────────────


class LogWindow:
    """Client-side view of a log source that extends toward the past.

    ``reload()`` fetches the newest page; ``load_more()`` fetches the page just
    before the oldest loaded line and prepends it.
    """

    def __init__(self, client: MonitorClient, source: str, limit: int = 300) -> None:
        self.client = client
        self.source = source
        self.limit = limit
        self.lines: list[str] = []
        self.oldest_offset = 0
        self.has_more = False

    async def reload(self) -> list[str]:
        page = await self.client.fetch_logs(self.source, limit=self.limit)
        self.lines = list(page["lines"])
        self.oldest_offset = page["offset"]
        self.has_more = bool(page["hasMore"])
        return self.lines

    async def load_more(self) -> list[str]:
        """Prepend the page that ends just before the oldest loaded line."""
        if not self.has_more or self.oldest_offset <= 0:
            self.has_more = False
            return []
        page = await self.client.fetch_logs(
            self.source, offset=self.oldest_offset, limit=self.limit, order="desc"
        )
        older = list(page["lines"])
        self.lines = older + self.lines
        self.oldest_offset = page["nextOffset"]
        self.has_more = bool(page["hasMore"])
        return older
