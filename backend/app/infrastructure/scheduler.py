"""Expiry Monitor — daily asyncio background loop for the expiry sweeps.

Invariants:
    - Sleeps until the configured UTC hour, then runs every job once per day
    - Each job gets its own DB session (committed by the job itself)
    - A failing job is logged and never stops the loop or the other jobs
    - stop() cancels the task and waits for it

Design Decisions:
    - Jobs injected as (name, callable) pairs: infrastructure stays unaware of services
    - asyncio task over an external scheduler: single-process deployment
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.datetimes import utc_now
from app.infrastructure import database

logger = logging.getLogger(__name__)

Job = Callable[[AsyncSession], Awaitable[dict]]


def seconds_until_hour(now: datetime, hour: int) -> float:
    """Seconds from now until the next occurrence of hour:00 UTC."""
    target = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


class ExpiryMonitor:
    """Runs the registered jobs once a day."""

    def __init__(self, jobs: list[tuple[str, Job]], run_hour_utc: int = 0):
        self.jobs = jobs
        self.run_hour_utc = run_hour_utc
        self._task: asyncio.Task | None = None

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._loop(), name="expiry-monitor")
            logger.info(
                f"Expiry monitor scheduled daily at {self.run_hour_utc:02d}:00 UTC",
            )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Expiry monitor stopped")

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(seconds_until_hour(utc_now(), self.run_hour_utc))
            await self.run_once()

    async def run_once(self) -> dict[str, dict]:
        """Run every job now; returns per-job counts (failed jobs map to {})."""
        results: dict[str, dict] = {}
        for name, job in self.jobs:
            try:
                async with database.db_manager.session() as db:
                    results[name] = await job(db)
                logger.info(f"Job {name} finished: {results[name]}", extra={"job": name})
            except Exception as e:
                logger.error(f"Job {name} failed: {e}", extra={"job": name}, exc_info=True)
                results[name] = {}
        return results
