# src/quote_sync/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires the concrete Notion source and Quote device sink into one SyncCoordinator,
- closes the HTTP clients on shutdown.
"""

from __future__ import annotations

import contextlib
import logging

from ..clients.notion_client import NotionItemSource
from ..clients.quote_client import QuoteDeviceClient
from ..config import get_settings
from ..core.state import AppState
from ..sync.coordinator import SyncCoordinator

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, source=None, sink=None) -> AppState:
    """
    Create AppState from the provided settings.

    Settings and collaborators are injectable so tests can run against fakes.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    missing = settings.missing_required() if hasattr(settings, "missing_required") else []
    if missing:
        logger.warning("Missing configuration: %s (syncs will fail until set)", ", ".join(missing))

    if source is None:
        source = NotionItemSource(settings)
    if sink is None:
        sink = QuoteDeviceClient(settings)

    coordinator = SyncCoordinator(source, sink, settings)
    return AppState(settings=settings, source=source, sink=sink, coordinator=coordinator)


async def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        await state.coordinator.aclose()
    except Exception:
        logger.exception("Failed to stop the sync queue.")

    for client in (state.source, state.sink):
        close = getattr(client, "aclose", None)
        if close is None:
            continue
        with contextlib.suppress(Exception):
            await close()
