"""Background sweeper that expires overdue survey assignments."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .config import settings
from .database import async_session_factory
from .services.assignment_svc import expire_overdue

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Periodically moves pending assignments past expiresAt to expired."""

    def __init__(self) -> None:
        self._task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()
        self.total_expired = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self._task is not None or not settings.expiry_sweeper_enabled:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run_loop(), name="survey-expiry-sweeper")
        logger.info("Expiry sweeper started (every %ss)", settings.expiry_sweep_interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stop_event.set()
        try:
            await asyncio.wait_for(self._task, timeout=5)
        except asyncio.TimeoutError:
            self._task.cancel()
        finally:
            self._task = None

    async def sweep_once(self) -> int:
        async with async_session_factory() as db:
            expired = await expire_overdue(db)
        self.total_expired += expired
        return expired

    async def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                await self.sweep_once()
            except Exception:  # pragma: no cover - retried next tick
                logger.exception("Expiry sweep failed")
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(), timeout=settings.expiry_sweep_interval_seconds
                )
            except asyncio.TimeoutError:
                pass


expiry_sweeper = ExpirySweeper()
