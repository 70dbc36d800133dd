# src/quote_sync/sync/coordinator.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from zoneinfo import ZoneInfo

from ..core.ports import ItemSource, PageSink
from .dedup_cache import DedupCache
from .models import CompletionCallback, QueueStatus, Submission, SyncTask, TaskKind
from .orchestrator import SyncOrchestrator
from .rate_limiter import RateLimiter
from .task_queue import SyncTaskQueue

logger = logging.getLogger(__name__)


def _clock_in(tz_name: str) -> Callable[[], datetime]:
    try:
        tz = ZoneInfo(tz_name)
    except Exception:
        logger.warning("Unknown display timezone %r; using local time", tz_name)
        return datetime.now
    return lambda: datetime.now(tz)


class SyncCoordinator:
    """
    Per-process owner of all sync state (queue, rate window, dedup ids).

    Construct once with the collaborators; trigger entry points only enqueue.
    """

    def __init__(
        self,
        source: ItemSource,
        sink: PageSink,
        settings,
        *,
        now_fn: Callable[[], datetime] | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self.settings = settings
        if rate_limiter is None:
            rate_limiter = RateLimiter(settings.max_calls_per_minute)
        self.rate_limiter = rate_limiter
        self.dedup = DedupCache(settings.dedup_cache_size)

        if now_fn is None:
            now_fn = _clock_in(getattr(settings, "display_timezone", "") or "UTC")

        self.orchestrator = SyncOrchestrator(
            source,
            sink,
            rate_limiter=self.rate_limiter,
            dedup=self.dedup,
            page_size=settings.page_size,
            item_text_limit=settings.item_text_limit,
            max_message_length=settings.max_message_length,
            rotation_window_minutes=settings.rotation_window_minutes,
            min_rotation_seconds=settings.min_rotation_seconds,
            call_timeout_seconds=settings.http_timeout_seconds,
            now_fn=now_fn,
        )
        self.queue = SyncTaskQueue(
            self.orchestrator.execute,
            rate_limiter=self.rate_limiter,
            dedup=self.dedup,
            rate_limit_backoff_seconds=settings.rate_limit_backoff_seconds,
            inter_task_delay_seconds=settings.inter_task_delay_seconds,
        )

    def _submit(self, task: SyncTask) -> Submission:
        accepted = self.queue.enqueue(task)
        return Submission(accepted=accepted, task=task)

    def submit_manual_trigger(self, *, on_complete: CompletionCallback | None = None) -> Submission:
        return self._submit(SyncTask(kind=TaskKind.MANUAL, forced=False, on_complete=on_complete))

    def submit_webhook_trigger(
        self,
        event_id: str | None,
        forced: bool = True,
        *,
        on_complete: CompletionCallback | None = None,
    ) -> Submission:
        return self._submit(
            SyncTask(kind=TaskKind.WEBHOOK, forced=forced, event_id=event_id or None, on_complete=on_complete)
        )

    def submit_scheduled_trigger(self) -> Submission | None:
        """Recurring tick; skipped while another scheduled sync is still waiting."""
        if self.queue.has_pending(lambda t: t.kind == TaskKind.SCHEDULED):
            logger.debug("Scheduled sync already queued; skipping tick")
            return None
        return self._submit(SyncTask(kind=TaskKind.SCHEDULED, forced=False))

    async def sync_now(self, forced: bool = False) -> bool:
        """Run one sync immediately, bypassing the queue. False when rate limited."""
        kind = TaskKind.WEBHOOK if forced else TaskKind.MANUAL
        try:
            return await self.orchestrator.execute(SyncTask(kind=kind, forced=forced))
        except Exception:
            logger.exception("Direct sync crashed")
            return False

    def get_queue_status(self) -> QueueStatus:
        return self.queue.status()

    async def aclose(self) -> None:
        await self.queue.aclose()
