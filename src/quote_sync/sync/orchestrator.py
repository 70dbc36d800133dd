# src/quote_sync/sync/orchestrator.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from ..core.errors import FetchError, friendly_sync_error_message
from ..core.ports import ItemSource, PageSink
from .dedup_cache import DedupCache
from .models import SyncTask
from .paginator import format_page_message, rotation_interval_minutes, select_page, total_pages_for
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """
    Runs one sync: fetch items -> pick the current page -> push it.

    Every collaborator failure (exception or timeout) is turned into a False result;
    nothing raised by the source or the sink escapes execute().
    """

    def __init__(
        self,
        source: ItemSource,
        sink: PageSink,
        *,
        rate_limiter: RateLimiter,
        dedup: DedupCache,
        page_size: int = 3,
        item_text_limit: int = 11,
        max_message_length: int = 500,
        rotation_window_minutes: int = 15,
        min_rotation_seconds: int = 5,
        call_timeout_seconds: float = 10.0,
        now_fn: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._source = source
        self._sink = sink
        self._rate_limiter = rate_limiter
        self._dedup = dedup
        self._page_size = max(1, int(page_size))
        self._item_text_limit = int(item_text_limit)
        self._max_message_length = int(max_message_length)
        self._rotation_window = int(rotation_window_minutes)
        self._min_rotation_s = int(min_rotation_seconds)
        self._timeout_s = float(call_timeout_seconds)
        self._now = now_fn

    async def execute(self, task: SyncTask) -> bool:
        if self._rate_limiter.is_over_limit():
            # Budget is untouched; the queue retries, direct callers get False.
            logger.warning("Rate limit reached; not calling the device API")
            return False

        self._rate_limiter.record_call()

        try:
            return await self._fetch_and_push()
        finally:
            # Recorded even on failure so a permanently bad payload is not retried forever.
            if task.event_id:
                self._dedup.mark_processed(task.event_id)

    async def _fetch_and_push(self) -> bool:
        logger.info("Fetching items from upstream...")
        try:
            fetched = await asyncio.wait_for(self._source.fetch_items(), timeout=self._timeout_s)
            if not isinstance(fetched, (list, tuple)):
                raise FetchError(f"item source returned {type(fetched).__name__}, expected a list")
            items = [str(i) for i in fetched]
        except asyncio.TimeoutError:
            logger.error("Fetching items timed out after %.1fs", self._timeout_s)
            return False
        except Exception as e:
            logger.error("Fetching items failed: %s", friendly_sync_error_message(e), exc_info=True)
            return False

        logger.info("Fetched %d items", len(items))

        total_pages = total_pages_for(len(items), self._page_size)
        interval = rotation_interval_minutes(
            total_pages,
            window_minutes=self._rotation_window,
            min_seconds=self._min_rotation_s,
        )
        page = select_page(items, self._page_size, interval, self._now())

        if page.is_empty:
            logger.info("No items to display; skipping push")
            return True

        message = format_page_message(
            page,
            item_text_limit=self._item_text_limit,
            max_message_length=self._max_message_length,
        )
        logger.info(
            "Pushing page %d/%d (%d of %d items)",
            page.page_number,
            page.total_pages,
            len(page.items),
            page.total_items,
        )

        try:
            result = await asyncio.wait_for(self._sink.push_page(page, message), timeout=self._timeout_s)
        except asyncio.TimeoutError:
            logger.error("Push timed out after %.1fs", self._timeout_s)
            return False
        except Exception as e:
            logger.error("Push failed: %s", friendly_sync_error_message(e), exc_info=True)
            return False

        if result.ok:
            logger.info("Page %d/%d pushed (status=%s)", page.page_number, page.total_pages, result.status)
            return True

        logger.error("Device rejected page %d: status=%s body=%r", page.page_number, result.status, result.body)
        return False
