# src/quote_sync/sync/task_queue.py

from __future__ import annotations

"""
Sync task queue.

Serializes concurrent trigger requests into a single execution stream:
- at most one task is in flight at any time (single drain loop, guarded by a flag),
- forced tasks go first (own FIFO lane), normal tasks keep FIFO order,
- duplicate event ids are answered as successful no-ops without running,
- when the rate limiter is saturated the task goes back to the head of its lane
  and the loop backs off instead of failing it.

Queue mutation never awaits, so enqueue() can interleave freely with a running drain
on the same event loop without a lock.
"""

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable

from .dedup_cache import DedupCache
from .models import QueueStatus, SyncTask
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

TaskExecutor = Callable[[SyncTask], Awaitable[bool]]


class SyncTaskQueue:
    def __init__(
        self,
        executor: TaskExecutor,
        *,
        rate_limiter: RateLimiter,
        dedup: DedupCache,
        rate_limit_backoff_seconds: float = 1.0,
        inter_task_delay_seconds: float = 0.5,
    ) -> None:
        self._executor = executor
        self._rate_limiter = rate_limiter
        self._dedup = dedup
        self._backoff_s = max(0.0, float(rate_limit_backoff_seconds))
        self._pause_s = max(0.0, float(inter_task_delay_seconds))

        self._forced: deque[SyncTask] = deque()
        self._normal: deque[SyncTask] = deque()
        # Event ids queued or in flight; a redelivery arriving before the first one
        # finishes is a duplicate too.
        self._pending_event_ids: set[str] = set()

        self._draining = False
        self._drain_task: asyncio.Task[None] | None = None

    def __len__(self) -> int:
        return len(self._forced) + len(self._normal)

    @property
    def is_draining(self) -> bool:
        return self._draining

    def has_pending(self, predicate: Callable[[SyncTask], bool]) -> bool:
        return any(predicate(t) for t in self._forced) or any(predicate(t) for t in self._normal)

    def status(self) -> QueueStatus:
        return QueueStatus(
            queue_length=len(self),
            is_draining=self._draining,
            recent_call_count=self._rate_limiter.recent_call_count(),
        )

    # ---- producer side ----

    def enqueue(self, task: SyncTask) -> bool:
        """
        Add a task and make sure the drain loop is running.

        Must be called from the event loop thread. Returns False (and resolves the
        task as successful) when its event id was already processed or is pending.
        """
        loop = asyncio.get_running_loop()
        if task.result is None:
            task.result = loop.create_future()

        event_id = task.event_id or None
        if event_id and (self._dedup.is_processed(event_id) or event_id in self._pending_event_ids):
            logger.info("Event %s already handled; skipping duplicate", event_id)
            self._complete(task, True)
            return False

        if event_id:
            self._pending_event_ids.add(event_id)

        (self._forced if task.forced else self._normal).append(task)
        logger.info(
            "Queued %s sync (forced=%s event_id=%s); queue length=%d",
            task.kind.value,
            task.forced,
            event_id,
            len(self),
        )

        self._ensure_draining()
        return True

    def _ensure_draining(self) -> None:
        if self._draining:
            return
        self._draining = True
        self._drain_task = asyncio.get_running_loop().create_task(self._drain(), name="sync-queue-drain")

    # ---- consumer side ----

    def _pop_next(self) -> SyncTask | None:
        if self._forced:
            return self._forced.popleft()
        if self._normal:
            return self._normal.popleft()
        return None

    def _requeue_front(self, task: SyncTask) -> None:
        (self._forced if task.forced else self._normal).appendleft(task)

    async def _drain(self) -> None:
        try:
            while True:
                task = self._pop_next()
                if task is None:
                    break

                logger.info("Processing %s sync (forced=%s)", task.kind.value, task.forced)

                if self._rate_limiter.is_over_limit():
                    logger.info("Rate limit reached; retrying in %.1fs", self._backoff_s)
                    self._requeue_front(task)
                    await asyncio.sleep(self._backoff_s)
                else:
                    await self._run(task)

                # Also after a rate-limited requeue.
                await asyncio.sleep(self._pause_s)
        finally:
            self._draining = False
            self._drain_task = None

    async def _run(self, task: SyncTask) -> None:
        try:
            success = bool(await self._executor(task))
        except asyncio.CancelledError:
            self._complete(task, False)
            raise
        except Exception:
            logger.exception("Sync task crashed (kind=%s event_id=%s)", task.kind.value, task.event_id)
            success = False

        if success:
            logger.info("Sync finished successfully")
        else:
            logger.error("Sync failed")

        self._complete(task, success)

    def _complete(self, task: SyncTask, success: bool) -> None:
        if task.event_id:
            self._pending_event_ids.discard(task.event_id)

        if task.result is not None and not task.result.done():
            task.result.set_result(success)

        if task.on_complete is not None:
            try:
                task.on_complete(success)
            except Exception:
                logger.exception("on_complete callback failed (kind=%s)", task.kind.value)

    async def aclose(self) -> None:
        """Stop the drain loop; tasks still queued resolve as failed."""
        drain = self._drain_task
        if drain is not None and not drain.done():
            drain.cancel()
            try:
                await drain
            except asyncio.CancelledError:
                pass

        while (task := self._pop_next()) is not None:
            self._complete(task, False)
