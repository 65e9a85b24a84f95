from __future__ import annotations

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class PeriodicSweeper:
    """Runs a housekeeping callable on a fixed interval in the background.

    Used to garbage-collect idle rate-limit records; the app lifespan owns
    ``start()`` and ``stop()``.
    """

    def __init__(self, name: str, task: Callable[[], object], interval: float = 60.0) -> None:
        self.name = name
        self.interval = interval
        self._fn = task
        self._running = False
        self._task: asyncio.Task | None = None

    # ── lifecycle ────────────────────────────────────────

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info("Sweeper [%s] started (interval=%.1fs)", self.name, self.interval)

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Sweeper [%s] stopped", self.name)

    # ── internals ───────────────────────────────────────

    async def _loop(self) -> None:
        while self._running:
            await asyncio.sleep(self.interval)
            try:
                self._fn()
            except Exception:
                logger.exception("Sweeper [%s] error during sweep", self.name)

    @property
    def running(self) -> bool:
        return self._running
