# src/quote_sync/sync/models.py

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

CompletionCallback = Callable[[bool], Any]


class TaskKind(StrEnum):
    MANUAL = "manual"
    WEBHOOK = "webhook"
    SCHEDULED = "scheduled"


@dataclass(slots=True)
class SyncTask:
    """
    One trigger request.

    Owned by the queue until dequeued, then by the orchestrator until it finishes.
    `result` is attached by the queue on enqueue and resolves exactly once with the
    success value; `on_complete` (if given) receives the same value.
    """

    kind: TaskKind
    forced: bool = False
    event_id: str | None = None
    enqueued_at: float = field(default_factory=time.time)
    on_complete: CompletionCallback | None = None
    result: asyncio.Future[bool] | None = field(default=None, repr=False)


@dataclass(slots=True, frozen=True)
class Submission:
    """What a trigger entry point hands back to its caller."""

    accepted: bool
    task: SyncTask

    async def wait(self) -> bool:
        if self.task.result is None:
            return False
        return await asyncio.shield(self.task.result)


@dataclass(slots=True, frozen=True)
class Page:
    items: list[str]
    page_number: int
    total_pages: int
    total_items: int
    generated_at: datetime
    start_index: int = 0

    @property
    def is_empty(self) -> bool:
        return self.total_pages == 0


@dataclass(slots=True, frozen=True)
class PushResult:
    status: int
    body: Any = None

    @property
    def ok(self) -> bool:
        # The device API reports success either via HTTP status or a body code.
        if self.status == 200:
            return True
        if isinstance(self.body, dict):
            try:
                return int(self.body.get("code")) == 200
            except (TypeError, ValueError):
                return False
        return False


@dataclass(slots=True, frozen=True)
class QueueStatus:
    queue_length: int
    is_draining: bool
    recent_call_count: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "queueLength": self.queue_length,
            "isDraining": self.is_draining,
            "recentCallCount": self.recent_call_count,
        }
