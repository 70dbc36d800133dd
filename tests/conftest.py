# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from quote_sync.cli.bootstrap import create_initial_state
from quote_sync.core.state import AppState
from quote_sync.sync.coordinator import SyncCoordinator

from .fakes import FakeItemSource, FakePageSink

# 09:00 -> minute 540 of the day; divisible by every rotation interval the tests use.
FIXED_NOW = datetime(2024, 5, 1, 9, 0, 0)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the coordinator, clients and web layer.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment. Delays are zero so
    queue tests run instantly.
    """
    return SimpleNamespace(
        app_name="quote-sync-test",
        data_dir=tmp_path / "data",
        # Rendering
        page_size=3,
        item_text_limit=11,
        max_message_length=500,
        rotation_window_minutes=15,
        min_rotation_seconds=5,
        http_timeout_seconds=2.0,
        display_timezone="UTC",
        # Coordination
        max_calls_per_minute=60,
        dedup_cache_size=1000,
        rate_limit_backoff_seconds=0.0,
        inter_task_delay_seconds=0.0,
        poll_interval_seconds=0.0,
        # Clients
        notion_api_key="secret_notion",
        notion_database_id="db123",
        notion_base_url="https://api.notion.test/v1",
        notion_version="2022-06-28",
        notion_status_property="Status",
        notion_title_property="Name",
        notion_status_value="In progress",
        dot_api_key="dot_key",
        quote_device_id="dev1",
        quote_api_endpoint="https://dot.test/api/device/dev1/text",
        quote_link="",
        # Triggers
        webhook_secret=None,
    )


@pytest.fixture()
def source() -> FakeItemSource:
    return FakeItemSource(["buy milk", "write report", "call dentist"])


@pytest.fixture()
def sink() -> FakePageSink:
    return FakePageSink()


@pytest.fixture()
def coordinator(settings, source, sink) -> SyncCoordinator:
    return SyncCoordinator(source, sink, settings, now_fn=lambda: FIXED_NOW)


@pytest.fixture()
def state(settings, source, sink, coordinator) -> AppState:
    st = create_initial_state(settings=settings, source=source, sink=sink)
    # Reuse the coordinator with the fixed clock.
    st.coordinator = coordinator
    return st
