# src/quote_sync/sync/scheduler.py

from __future__ import annotations

import asyncio
import logging

from .coordinator import SyncCoordinator

logger = logging.getLogger(__name__)


async def run_sync_scheduler(
        coordinator: SyncCoordinator,
        *,
        interval_seconds: float = 60.0,
        run_immediately: bool = True,
) -> None:
    """
    Recurring trigger.

    Every interval_seconds:
    - submit a scheduled (non-forced) sync through the queue
    - skip the tick if the previous scheduled sync is still waiting

    The tick never awaits the sync itself, so a slow device does not stretch the interval.
    To stop the scheduler, cancel the coroutine/task.
    """
    sleep_s = max(0.5, float(interval_seconds))
    logger.info("Sync scheduler started (every %.1fs)", sleep_s)

    if not run_immediately:
        await asyncio.sleep(sleep_s)

    while True:
        try:
            coordinator.submit_scheduled_trigger()
        except Exception:
            logger.exception("Scheduled trigger failed")

        await asyncio.sleep(sleep_s)
