# src/quote_sync/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..sync.coordinator import SyncCoordinator
from .ports import ItemSource, PageSink


@dataclass
class AppState:
    """Everything connectors and commands need, wired once in cli/bootstrap.py."""

    # Settings or a compatible object (tests use SimpleNamespace).
    settings: Any

    source: ItemSource
    sink: PageSink
    coordinator: SyncCoordinator

    # Background asyncio tasks owned by the app (scheduler, web server, ...).
    background: list[Any] = field(default_factory=list)
