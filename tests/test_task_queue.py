# tests/test_task_queue.py

from __future__ import annotations

import asyncio

import pytest

from quote_sync.sync.dedup_cache import DedupCache
from quote_sync.sync.models import SyncTask, TaskKind
from quote_sync.sync.rate_limiter import RateLimiter
from quote_sync.sync.task_queue import SyncTaskQueue

from .fakes import FakeClock


class RecordingExecutor:
    """Executor stand-in: records run order by event id, optionally failing some tasks."""

    def __init__(self, *, fail: set[str] | None = None, crash: set[str] | None = None) -> None:
        self.order: list[str | None] = []
        self.fail = fail or set()
        self.crash = crash or set()
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, task: SyncTask) -> bool:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            self.order.append(task.event_id)
            if task.event_id in self.crash:
                raise RuntimeError("boom")
            return task.event_id not in self.fail
        finally:
            self.in_flight -= 1


def _queue(
    executor,
    *,
    limiter: RateLimiter | None = None,
    dedup: DedupCache | None = None,
    backoff: float = 0.0,
    pause: float = 0.0,
) -> SyncTaskQueue:
    return SyncTaskQueue(
        executor,
        rate_limiter=limiter if limiter is not None else RateLimiter(60, clock=FakeClock()),
        dedup=dedup if dedup is not None else DedupCache(100),
        rate_limit_backoff_seconds=backoff,
        inter_task_delay_seconds=pause,
    )


def _task(event_id: str, *, forced: bool = False) -> SyncTask:
    return SyncTask(kind=TaskKind.MANUAL, forced=forced, event_id=event_id)


@pytest.mark.asyncio
async def test_forced_task_overtakes_normal_ones() -> None:
    executor = RecordingExecutor()
    queue = _queue(executor)

    tasks = [_task("A"), _task("B"), _task("C", forced=True)]
    for t in tasks:
        assert queue.enqueue(t) is True

    results = await asyncio.gather(*(t.result for t in tasks))

    assert executor.order == ["C", "A", "B"]
    assert results == [True, True, True]
    assert executor.max_in_flight == 1


@pytest.mark.asyncio
async def test_forced_tasks_keep_fifo_among_themselves() -> None:
    executor = RecordingExecutor()
    queue = _queue(executor)

    tasks = [_task("n1"), _task("f1", forced=True), _task("n2"), _task("f2", forced=True)]
    for t in tasks:
        queue.enqueue(t)
    await asyncio.gather(*(t.result for t in tasks))

    assert executor.order == ["f1", "f2", "n1", "n2"]


@pytest.mark.asyncio
async def test_duplicate_event_is_skipped_and_reported_as_success() -> None:
    executor = RecordingExecutor()
    dedup = DedupCache(100)
    queue = _queue(executor, dedup=dedup)

    first = _task("evt-1")
    assert queue.enqueue(first) is True

    callbacks: list[bool] = []
    pending_dup = SyncTask(kind=TaskKind.WEBHOOK, forced=True, event_id="evt-1", on_complete=callbacks.append)
    assert queue.enqueue(pending_dup) is False
    assert callbacks == [True]
    assert pending_dup.result is not None and pending_dup.result.result() is True

    assert await first.result is True

    # Once processed (as the orchestrator would record it), later redeliveries are skipped too.
    dedup.mark_processed("evt-1")
    late = _task("evt-1")
    assert queue.enqueue(late) is False
    assert await late.result is True

    assert executor.order == ["evt-1"]


@pytest.mark.asyncio
async def test_tasks_without_event_id_are_never_deduplicated() -> None:
    executor = RecordingExecutor()
    queue = _queue(executor)

    tasks = [SyncTask(kind=TaskKind.MANUAL), SyncTask(kind=TaskKind.MANUAL, event_id="")]
    assert all(queue.enqueue(t) for t in tasks)
    await asyncio.gather(*(t.result for t in tasks))

    assert len(executor.order) == 2


@pytest.mark.asyncio
async def test_failure_and_crash_do_not_stop_the_loop() -> None:
    executor = RecordingExecutor(fail={"bad"}, crash={"boom"})
    queue = _queue(executor)

    callbacks: list[bool] = []
    tasks = [_task("bad"), _task("boom"), _task("good")]
    tasks[1].on_complete = callbacks.append
    for t in tasks:
        queue.enqueue(t)

    results = await asyncio.gather(*(t.result for t in tasks))

    assert results == [False, False, True]
    assert callbacks == [False]
    assert executor.order == ["bad", "boom", "good"]


@pytest.mark.asyncio
async def test_rate_limited_task_is_requeued_not_failed() -> None:
    clock = FakeClock()
    limiter = RateLimiter(1, clock=clock)
    limiter.record_call()

    executor = RecordingExecutor()
    queue = _queue(executor, limiter=limiter)

    task = _task("late")
    queue.enqueue(task)

    for _ in range(20):
        await asyncio.sleep(0)

    assert executor.order == []
    assert not task.result.done()
    assert len(queue) == 1
    assert queue.is_draining

    clock.advance(61)
    assert await asyncio.wait_for(task.result, timeout=1.0) is True
    assert executor.order == ["late"]


@pytest.mark.asyncio
async def test_rate_limited_task_keeps_its_place_and_forced_still_overtakes() -> None:
    clock = FakeClock()
    limiter = RateLimiter(1, clock=clock)
    limiter.record_call()

    executor = RecordingExecutor()
    queue = _queue(executor, limiter=limiter)

    normal = [_task("n1"), _task("n2")]
    for t in normal:
        queue.enqueue(t)
    for _ in range(20):
        await asyncio.sleep(0)

    # Arrives while the loop is backing off.
    forced = _task("f1", forced=True)
    queue.enqueue(forced)
    for _ in range(20):
        await asyncio.sleep(0)

    assert executor.order == []
    assert len(queue) == 3

    clock.advance(61)
    await asyncio.wait_for(asyncio.gather(*(t.result for t in [*normal, forced])), timeout=1.0)

    assert executor.order == ["f1", "n1", "n2"]


@pytest.mark.asyncio
async def test_loop_pauses_after_requeue_as_well_as_after_runs(monkeypatch: pytest.MonkeyPatch) -> None:
    real_sleep = asyncio.sleep
    delays: list[float] = []

    async def recording_sleep(delay: float, *args, **kwargs):
        if delay:
            delays.append(delay)
        return await real_sleep(0)

    monkeypatch.setattr(asyncio, "sleep", recording_sleep)

    clock = FakeClock()
    limiter = RateLimiter(1, clock=clock)
    limiter.record_call()
    queue = _queue(RecordingExecutor(), limiter=limiter, backoff=0.25, pause=0.125)

    task = _task("slow")
    queue.enqueue(task)
    for _ in range(6):
        await asyncio.sleep(0)

    clock.advance(61)
    assert await asyncio.wait_for(task.result, timeout=1.0) is True
    for _ in range(3):
        await asyncio.sleep(0)

    assert delays[:2] == [0.25, 0.125]
    assert delays[-1] == 0.125
    assert delays.count(0.25) == delays.count(0.125) - 1


@pytest.mark.asyncio
async def test_drain_stops_when_empty_and_restarts_on_enqueue() -> None:
    executor = RecordingExecutor()
    queue = _queue(executor)

    first = _task("one")
    queue.enqueue(first)
    assert queue.is_draining
    await first.result

    for _ in range(5):
        await asyncio.sleep(0)
    assert queue.is_draining is False
    assert queue.status().queue_length == 0

    second = _task("two")
    queue.enqueue(second)
    assert queue.is_draining
    assert await second.result is True
    assert executor.order == ["one", "two"]


@pytest.mark.asyncio
async def test_aclose_fails_waiting_tasks() -> None:
    clock = FakeClock()
    limiter = RateLimiter(1, clock=clock)
    limiter.record_call()
    queue = _queue(RecordingExecutor(), limiter=limiter)

    task = _task("stuck")
    queue.enqueue(task)
    await asyncio.sleep(0)

    await queue.aclose()

    assert task.result.result() is False
    assert len(queue) == 0
    assert queue.is_draining is False
