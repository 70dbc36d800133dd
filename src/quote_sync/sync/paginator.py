# src/quote_sync/sync/paginator.py

from __future__ import annotations

"""
Time-based page selection.

The visible page is a pure function of (items, page size, rotation interval, wall clock):
no counter is stored, so any process converges on the same page for the same minute.
"""

import math
from datetime import datetime

from .models import Page

ELLIPSIS = "..."
MIN_INTERVAL_MINUTES = 1.0


def total_pages_for(total_items: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    return math.ceil(max(0, total_items) / page_size)


def rotation_interval_minutes(
    total_pages: int,
    *,
    window_minutes: int = 15,
    min_seconds: int = 5,
) -> float:
    """
    How long each page stays visible, in minutes.

    A full cycle over all pages is spread across a third of the window, so more
    content means faster rotation: floor(window*60 / pages / 3) seconds, never
    below min_seconds.

    select_page reads the clock per minute, so the result never drops below one
    minute: a shorter slot lets consecutive minutes jump over a page index.
    """
    pages = max(1, int(total_pages))
    seconds = max(int(min_seconds), math.floor(window_minutes * 60 / pages / 3))
    return max(MIN_INTERVAL_MINUTES, seconds / 60.0)


def select_page(
    items: list[str],
    page_size: int,
    rotation_interval_minutes: float,
    now: datetime,
) -> Page:
    total_items = len(items)
    total_pages = total_pages_for(total_items, page_size)

    if total_pages == 0:
        return Page(
            items=[],
            page_number=0,
            total_pages=0,
            total_items=0,
            generated_at=now,
            start_index=0,
        )

    if rotation_interval_minutes <= 0:
        raise ValueError(f"rotation interval must be positive, got {rotation_interval_minutes}")

    minutes_since_midnight = now.hour * 60 + now.minute
    page_index = math.floor((minutes_since_midnight / rotation_interval_minutes) % total_pages)

    start = page_index * page_size
    end = min(start + page_size, total_items)

    return Page(
        items=list(items[start:end]),
        page_number=page_index + 1,
        total_pages=total_pages,
        total_items=total_items,
        generated_at=now,
        start_index=start,
    )


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def format_page_message(page: Page, *, item_text_limit: int = 11, max_message_length: int = 500) -> str:
    """
    Render a page as numbered lines.

    Numbers continue from the page's start index so they stay unique across pages.
    Each item is capped at item_text_limit chars, the whole message at max_message_length.
    """
    lines = [
        f"{page.start_index + offset + 1}. {truncate(item, item_text_limit)}"
        for offset, item in enumerate(page.items)
    ]
    return truncate("\n".join(lines), max_message_length)
