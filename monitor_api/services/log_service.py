from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from pathlib import Path

from monitor_api.collectors.log_reader import read_range, read_tail
from monitor_api.errors import LogUnavailable, UnknownSource
from monitor_api.models.logs import LogOrder, LogPage

logger = logging.getLogger(__name__)


class LogService:
    """Offset-addressed pagination over an allow-list of log files.

    Callers name a source id, never a path. Offsets are stable line indices
    as long as the owning process only appends; rotation or truncation
    between two reads invalidates them.
    """

    def __init__(
        self,
        sources: Mapping[str, str | Path],
        default_limit: int = 300,
        max_limit: int = 300,
    ) -> None:
        self.sources = {key: Path(path) for key, path in sources.items()}
        self.max_limit = max_limit
        self.default_limit = min(default_limit, max_limit)

    def clamp_limit(self, limit: int | None) -> int:
        if limit is None:
            return self.default_limit
        return max(1, min(limit, self.max_limit))

    async def get_page(
        self,
        source_id: str,
        offset: int | None = None,
        limit: int | None = None,
        order: LogOrder = LogOrder.ASC,
    ) -> LogPage:
        path = self.sources.get(source_id)
        if path is None:
            raise UnknownSource(source_id)

        limit = self.clamp_limit(limit)
        try:
            if offset is None:
                return await self._tail(source_id, path, limit)
            if order == LogOrder.DESC:
                return await self._tail(source_id, path, limit, end=offset)
            return await self._forward(source_id, path, offset, limit)
        except OSError as exc:
            logger.error("Cannot read log source %s (%s): %s", source_id, path, exc)
            raise LogUnavailable(detail=str(exc)) from exc

    async def _forward(self, source_id: str, path: Path, offset: int, limit: int) -> LogPage:
        lines, has_more = await asyncio.to_thread(read_range, path, offset, offset + limit)
        next_offset = offset + len(lines)
        return LogPage(
            source=source_id,
            lines=lines,
            offset=offset,
            limit=limit,
            next_offset=next_offset,
            has_more=has_more,
        )

    async def _tail(
        self, source_id: str, path: Path, limit: int, end: int | None = None
    ) -> LogPage:
        lines, total = await asyncio.to_thread(read_tail, path, limit, end)
        stop = total if end is None else min(end, total)
        start = stop - len(lines)
        return LogPage(
            source=source_id,
            lines=lines,
            offset=start,
            limit=limit,
            next_offset=start,
            has_more=start > 0,
        )
