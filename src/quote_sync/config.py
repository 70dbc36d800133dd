# src/quote_sync/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (missing credentials are reported, not raised).
- Accept the legacy unprefixed variable names of the original deployment
  (NOTION_API_KEY, DOT_API_KEY, ...) as fallbacks.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

ENV_PREFIX = "QUOTE_SYNC"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Notion (upstream) ----
    notion_api_key: Optional[str]
    notion_database_id: Optional[str]
    notion_base_url: str
    notion_version: str
    notion_status_property: str
    notion_title_property: str
    notion_status_value: str

    # ---- Quote device (downstream) ----
    dot_api_key: Optional[str]
    quote_device_id: Optional[str]
    quote_api_base: str
    quote_link: str
    display_timezone: str

    # ---- Rendering ----
    http_timeout_seconds: float
    page_size: int
    item_text_limit: int
    max_message_length: int
    rotation_window_minutes: int
    min_rotation_seconds: int

    # ---- Coordination ----
    max_calls_per_minute: int
    dedup_cache_size: int
    rate_limit_backoff_seconds: float
    inter_task_delay_seconds: float
    poll_interval_seconds: float

    # ---- Triggers ----
    webhook_secret: Optional[str]
    web_enabled: bool
    web_host: str
    web_port: int
    console_enabled: bool

    @property
    def quote_api_endpoint(self) -> str:
        return f"{self.quote_api_base.rstrip('/')}/{self.quote_device_id or ''}/text"

    def missing_required(self) -> List[str]:
        """Names of credentials that must be set before a sync can run."""
        required = {
            "notion_api_key": self.notion_api_key,
            "notion_database_id": self.notion_database_id,
            "dot_api_key": self.dot_api_key,
            "quote_device_id": self.quote_device_id,
        }
        return [name for name, value in required.items() if not value]

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "quote-sync")
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/quote_sync"))

        notion_api_key = _first_env(_k("NOTION_API_KEY"), "NOTION_API_KEY", default=None)
        notion_database_id = _first_env(_k("NOTION_DATABASE_ID"), "NOTION_DATABASE_ID", default=None)

        dot_api_key = _first_env(_k("DOT_API_KEY"), "DOT_API_KEY", default=None)
        quote_device_id = _first_env(_k("QUOTE_DEVICE_ID"), "QUOTE_DEVICE_ID", default=None)

        webhook_secret = _first_env(_k("WEBHOOK_SECRET"), "NOTION_WEBHOOK_SECRET", default=None)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            notion_api_key=notion_api_key,
            notion_database_id=notion_database_id,
            notion_base_url=_env(_k("NOTION_BASE_URL"), "https://api.notion.com/v1"),
            notion_version=_env(_k("NOTION_VERSION"), "2022-06-28"),
            notion_status_property=_env(_k("NOTION_STATUS_PROPERTY"), "Status"),
            notion_title_property=_env(_k("NOTION_TITLE_PROPERTY"), "Name"),
            notion_status_value=_env(_k("NOTION_STATUS_VALUE"), "In progress"),
            dot_api_key=dot_api_key,
            quote_device_id=quote_device_id,
            quote_api_base=_env(
                _k("QUOTE_API_BASE"), "https://dot.mindreset.tech/api/authV2/open/device"
            ),
            quote_link=_env(_k("QUOTE_LINK"), ""),
            display_timezone=_env(_k("DISPLAY_TIMEZONE"), "Asia/Shanghai"),
            http_timeout_seconds=_env_float(_k("HTTP_TIMEOUT_SECONDS"), 10.0),
            page_size=max(1, _env_int(_k("PAGE_SIZE"), 3)),
            item_text_limit=max(1, _env_int(_k("ITEM_TEXT_LIMIT"), 11)),
            max_message_length=max(1, _env_int(_k("MAX_MESSAGE_LENGTH"), 500)),
            rotation_window_minutes=max(1, _env_int(_k("ROTATION_WINDOW_MINUTES"), 15)),
            min_rotation_seconds=max(1, _env_int(_k("MIN_ROTATION_SECONDS"), 5)),
            max_calls_per_minute=max(1, _env_int(_k("MAX_CALLS_PER_MINUTE"), 60)),
            dedup_cache_size=max(2, _env_int(_k("DEDUP_CACHE_SIZE"), 1000)),
            rate_limit_backoff_seconds=_env_float(_k("RATE_LIMIT_BACKOFF_SECONDS"), 1.0),
            inter_task_delay_seconds=_env_float(_k("INTER_TASK_DELAY_SECONDS"), 0.5),
            poll_interval_seconds=_env_float(_k("POLL_INTERVAL_SECONDS"), 0.0),
            webhook_secret=webhook_secret,
            web_enabled=_env_bool(_k("WEB_ENABLED"), True),
            web_host=_env(_k("WEB_HOST"), "0.0.0.0"),
            web_port=_env_int(_k("WEB_PORT"), _env_int("PORT", 3000)),
            console_enabled=_env_bool(_k("CONSOLE_ENABLED"), False),
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
