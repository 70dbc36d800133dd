# src/quote_sync/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the sync core.

The core depends on Protocols instead of concrete clients.
This keeps the upstream source and the display device swappable and makes testing easier.
"""

from typing import TYPE_CHECKING, Awaitable, Protocol

if TYPE_CHECKING:
    from ..sync.models import Page, PushResult


class ItemSource(Protocol):
    """
    Upstream side: returns the display strings of all currently eligible items.

    Filtering (which items are "in progress") is the source's job.
    Raises on transport/auth failure.
    """

    def fetch_items(self) -> Awaitable[list[str]]: ...


class PageSink(Protocol):
    """
    Downstream side: pushes one rendered page to the display device.

    Returns the raw outcome (status + body) for any HTTP response;
    raises on transport failure. The core decides what counts as success.
    """

    def push_page(self, page: Page, message: str) -> Awaitable[PushResult]: ...
