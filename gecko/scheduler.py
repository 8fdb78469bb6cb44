"""Scheduler — runs sync passes in the background.

Runs as an asyncio background task for the lifetime of the process.
The first pass starts right away, the following ones on schedule.

Schedule types:
- 'interval': every N seconds
- 'cron': based on a cron expression
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

from croniter import croniter

logger = logging.getLogger("gecko.scheduler")


def _calculate_next_run(
    schedule_type: str,
    schedule_value: str,
    from_time: Optional[datetime] = None,
) -> Optional[datetime]:
    """Calculate next run time based on schedule type.

    Args:
        schedule_type: 'interval' or 'cron'
        schedule_value: Value depends on type:
            - interval: seconds as string
            - cron: cron expression
        from_time: Calculate from this time (default: now)

    Returns:
        Next run datetime (timezone-aware UTC) or None
    """
    now = from_time or datetime.now(timezone.utc)

    if schedule_type == "interval":
        try:
            seconds = int(schedule_value)
        except ValueError:
            logger.error(f"Invalid interval value '{schedule_value}'")
            return None
        if seconds <= 0:
            logger.error(f"Interval must be positive, got {seconds}")
            return None
        return now + timedelta(seconds=seconds)

    elif schedule_type == "cron":
        if not croniter.is_valid(schedule_value):
            logger.error(f"Invalid cron expression '{schedule_value}'")
            return None
        return croniter(schedule_value, now).get_next(datetime)

    else:
        logger.error(f"Unknown schedule type: {schedule_type}")
        return None


class Scheduler:
    """Background sync scheduler.

    Usage:
        scheduler = Scheduler(on_tick=sync_everything, interval=600)
        await scheduler.start()
        # ... later ...
        await scheduler.stop()
    """

    def __init__(
        self,
        on_tick: Callable[[], Awaitable[None]],
        interval: int = 600,
        cron: Optional[str] = None,
    ):
        """Initialize scheduler.

        Args:
            on_tick: Async callback running one round of sync passes
            interval: Seconds between rounds
            cron: Cron expression; takes precedence over interval
        """
        self._on_tick = on_tick
        if cron:
            self._schedule = ("cron", cron)
        else:
            self._schedule = ("interval", str(interval))
        if _calculate_next_run(*self._schedule) is None:
            raise ValueError(f"Invalid {self._schedule[0]} schedule: {self._schedule[1]}")
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """Start the scheduler background task."""
        if self._running:
            logger.warning("Scheduler already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(f"Scheduler started ({self._schedule[0]}: {self._schedule[1]})")

    async def stop(self):
        """Stop the scheduler."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Scheduler stopped")

    async def wait(self):
        """Block until the scheduler task ends."""
        if self._task:
            await self._task

    async def _run_loop(self):
        """Main scheduler loop."""
        while self._running:
            await self.tick()

            now = datetime.now(timezone.utc)
            next_run = _calculate_next_run(*self._schedule, from_time=now)
            delay = (next_run - now).total_seconds()
            logger.debug(f"Next sync at {next_run.isoformat()}")
            await asyncio.sleep(max(delay, 0))

    async def tick(self):
        """Run the callback once. Errors are logged; the next tick retries."""
        try:
            await self._on_tick()
        except Exception as e:
            logger.error(f"Scheduled sync failed: {e}", exc_info=True)
