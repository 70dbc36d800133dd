# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets; keep them in .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "QUOTE_SYNC_APP_NAME": "App display name (default: quote-sync).",
    "QUOTE_SYNC_LOG_LEVEL": "Console logging level (default: INFO).",
    "QUOTE_SYNC_DATA_DIR": "Local data/log directory (default: .local/quote_sync).",
    # Notion
    "QUOTE_SYNC_NOTION_API_KEY": "Notion integration token (legacy: NOTION_API_KEY).",
    "QUOTE_SYNC_NOTION_DATABASE_ID": "Notion database to read (legacy: NOTION_DATABASE_ID).",
    "QUOTE_SYNC_NOTION_STATUS_PROPERTY": "Status column name (default: Status).",
    "QUOTE_SYNC_NOTION_STATUS_VALUE": "Status value that marks an item as shown (default: In progress).",
    "QUOTE_SYNC_NOTION_TITLE_PROPERTY": "Title column name (default: Name).",
    "QUOTE_SYNC_NOTION_VERSION": "Notion-Version header (default: 2022-06-28).",
    # Quote device
    "QUOTE_SYNC_DOT_API_KEY": "Dot. open API key (legacy: DOT_API_KEY).",
    "QUOTE_SYNC_QUOTE_DEVICE_ID": "Quote/0 device id (legacy: QUOTE_DEVICE_ID).",
    "QUOTE_SYNC_QUOTE_LINK": "Optional link opened when the device text is tapped.",
    "QUOTE_SYNC_DISPLAY_TIMEZONE": "Timezone for page rotation and the signature clock (default: Asia/Shanghai).",
    # Rendering
    "QUOTE_SYNC_PAGE_SIZE": "Items per page (default: 3).",
    "QUOTE_SYNC_ITEM_TEXT_LIMIT": "Max characters per item before '...' (default: 11).",
    "QUOTE_SYNC_MAX_MESSAGE_LENGTH": "Max characters per pushed message (default: 500).",
    "QUOTE_SYNC_ROTATION_WINDOW_MINUTES": "Window used to derive page rotation speed (default: 15).",
    "QUOTE_SYNC_MIN_ROTATION_SECONDS": "Fastest allowed page rotation (default: 5).",
    "QUOTE_SYNC_HTTP_TIMEOUT_SECONDS": "Timeout for Notion and device calls (default: 10).",
    # Coordination
    "QUOTE_SYNC_MAX_CALLS_PER_MINUTE": "Device API calls allowed per rolling minute (default: 60).",
    "QUOTE_SYNC_DEDUP_CACHE_SIZE": "Webhook event ids remembered (default: 1000).",
    "QUOTE_SYNC_RATE_LIMIT_BACKOFF_SECONDS": "Pause before retrying a rate-limited sync (default: 1).",
    "QUOTE_SYNC_INTER_TASK_DELAY_SECONDS": "Pause between queued syncs (default: 0.5).",
    "QUOTE_SYNC_POLL_INTERVAL_SECONDS": "Recurring sync interval; 0 disables (default: 0).",
    # Triggers
    "QUOTE_SYNC_WEBHOOK_SECRET": "HMAC secret for X-Notion-Signature (legacy: NOTION_WEBHOOK_SECRET).",
    "QUOTE_SYNC_WEB_ENABLED": "Serve the HTTP trigger endpoints (default: true).",
    "QUOTE_SYNC_WEB_HOST": "HTTP bind host (default: 0.0.0.0).",
    "QUOTE_SYNC_WEB_PORT": "HTTP port (default: $PORT or 3000).",
    "QUOTE_SYNC_CONSOLE_ENABLED": "Interactive slash-command console (default: false).",
}
