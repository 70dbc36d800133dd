# tests/test_sync_coordinator.py

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from quote_sync.core.errors import FetchError, PushError
from quote_sync.sync.coordinator import SyncCoordinator
from quote_sync.sync.models import PushResult, SyncTask, TaskKind
from quote_sync.sync.rate_limiter import RateLimiter
from quote_sync.sync.scheduler import run_sync_scheduler

from .conftest import FIXED_NOW
from .fakes import FakeClock, FakeItemSource, FakePageSink


@pytest.mark.asyncio
async def test_end_to_end_webhook_then_duplicate(coordinator: SyncCoordinator, sink: FakePageSink) -> None:
    sub = coordinator.submit_webhook_trigger("evt-42")
    assert sub.accepted is True
    assert await sub.wait() is True

    assert len(sink.pushed) == 1
    pushed = sink.pushed[0]
    assert pushed.page.page_number == 1
    assert pushed.page.total_pages == 1
    # Items longer than 11 characters are shortened for the device.
    assert pushed.message == "1. buy milk\n2. write repor...\n3. call dentis..."

    callbacks: list[bool] = []
    dup = coordinator.submit_webhook_trigger("evt-42", on_complete=callbacks.append)
    assert dup.accepted is False
    assert callbacks == [True]
    assert await dup.wait() is True

    await asyncio.sleep(0.01)
    assert len(sink.pushed) == 1


@pytest.mark.asyncio
async def test_execute_returns_true_on_body_code_success(settings, source) -> None:
    sink = FakePageSink(result=PushResult(status=500, body={"code": 200}))
    coordinator = SyncCoordinator(source, sink, settings, now_fn=lambda: FIXED_NOW)

    assert await coordinator.orchestrator.execute(SyncTask(kind=TaskKind.MANUAL)) is True


@pytest.mark.asyncio
async def test_rejected_push_fails_but_still_marks_event(settings, source) -> None:
    sink = FakePageSink(result=PushResult(status=400, body={"code": 400, "message": "bad"}))
    coordinator = SyncCoordinator(source, sink, settings, now_fn=lambda: FIXED_NOW)

    sub = coordinator.submit_webhook_trigger("evt-bad")
    assert await sub.wait() is False
    assert coordinator.dedup.is_processed("evt-bad")


@pytest.mark.asyncio
async def test_fetch_failure_skips_push(settings, sink) -> None:
    source = FakeItemSource(error=FetchError("down", status=503))
    coordinator = SyncCoordinator(source, sink, settings, now_fn=lambda: FIXED_NOW)

    sub = coordinator.submit_manual_trigger()
    assert await sub.wait() is False
    assert source.calls == 1
    assert sink.pushed == []


@pytest.mark.asyncio
async def test_malformed_source_result_is_a_fetch_failure(settings, sink) -> None:
    class NoneSource:
        async def fetch_items(self):
            return None

    coordinator = SyncCoordinator(NoneSource(), sink, settings, now_fn=lambda: FIXED_NOW)

    assert await coordinator.orchestrator.execute(SyncTask(kind=TaskKind.MANUAL, event_id="evt-none")) is False
    assert sink.pushed == []
    assert coordinator.dedup.is_processed("evt-none")


@pytest.mark.asyncio
async def test_every_page_is_pushed_over_a_day_of_minutely_syncs(settings, sink) -> None:
    items = [f"task {i}" for i in range(1, 19)]  # 6 pages
    clock = FakeClock()
    now = {"t": FIXED_NOW.replace(hour=0)}
    coordinator = SyncCoordinator(
        FakeItemSource(items),
        sink,
        settings,
        now_fn=lambda: now["t"],
        rate_limiter=RateLimiter(60, clock=clock),
    )

    for _ in range(24 * 60):
        assert await coordinator.sync_now() is True
        now["t"] += timedelta(minutes=1)
        clock.advance(60)

    assert {p.page.page_number for p in sink.pushed} == {1, 2, 3, 4, 5, 6}
    assert {item for p in sink.pushed for item in p.page.items} == set(items)


@pytest.mark.asyncio
async def test_push_transport_error_is_a_failure(settings, source) -> None:
    sink = FakePageSink(error=PushError("connection reset"))
    coordinator = SyncCoordinator(source, sink, settings, now_fn=lambda: FIXED_NOW)

    assert await coordinator.submit_manual_trigger().wait() is False


@pytest.mark.asyncio
async def test_slow_collaborator_times_out(settings, source) -> None:
    settings.http_timeout_seconds = 0.05
    sink = FakePageSink(delay=1.0)
    coordinator = SyncCoordinator(source, sink, settings, now_fn=lambda: FIXED_NOW)

    assert await coordinator.submit_manual_trigger().wait() is False


@pytest.mark.asyncio
async def test_empty_item_list_succeeds_without_push(settings, sink) -> None:
    coordinator = SyncCoordinator(FakeItemSource([]), sink, settings, now_fn=lambda: FIXED_NOW)

    assert await coordinator.submit_manual_trigger().wait() is True
    assert sink.pushed == []


@pytest.mark.asyncio
async def test_sync_now_refuses_when_rate_limited(settings, source, sink) -> None:
    limiter = RateLimiter(1, clock=FakeClock())
    limiter.record_call()
    coordinator = SyncCoordinator(source, sink, settings, now_fn=lambda: FIXED_NOW, rate_limiter=limiter)

    assert await coordinator.sync_now() is False
    assert source.calls == 0
    # The refused attempt did not consume budget.
    assert limiter.recent_call_count() == 1


@pytest.mark.asyncio
async def test_each_execution_records_one_call(coordinator: SyncCoordinator) -> None:
    assert await coordinator.sync_now(forced=True) is True
    assert await coordinator.submit_manual_trigger().wait() is True

    status = coordinator.get_queue_status()
    assert status.recent_call_count == 2
    assert status.queue_length == 0


@pytest.mark.asyncio
async def test_later_pages_number_items_globally(settings, sink) -> None:
    items = [f"task {i}" for i in range(1, 6)]
    # 2 pages -> 150s rotation = 2.5 min; minute 540 / 2.5 = 216 -> page 1; minute 543 -> 217.2 -> page 2
    coordinator = SyncCoordinator(
        FakeItemSource(items), sink, settings, now_fn=lambda: FIXED_NOW.replace(minute=3)
    )

    assert await coordinator.sync_now() is True
    page = sink.pushed[0].page
    assert page.page_number == 2
    assert sink.pushed[0].message == "4. task 4\n5. task 5"


@pytest.mark.asyncio
async def test_scheduler_submits_one_scheduled_sync_per_tick(coordinator: SyncCoordinator, sink: FakePageSink) -> None:
    runner = asyncio.create_task(run_sync_scheduler(coordinator, interval_seconds=0.5))

    await asyncio.sleep(0.1)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert len(sink.pushed) == 1


@pytest.mark.asyncio
async def test_scheduled_tick_skipped_while_one_is_waiting(coordinator: SyncCoordinator) -> None:
    first = coordinator.submit_scheduled_trigger()
    second = coordinator.submit_scheduled_trigger()

    assert first is not None and first.accepted
    assert second is None
    assert await first.wait() is True
