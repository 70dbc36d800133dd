# src/quote_sync/clients/quote_client.py

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.errors import PushError
from ..sync.models import Page, PushResult

logger = logging.getLogger(__name__)


def build_payload(page: Page, message: str, *, link: str = "") -> dict[str, Any]:
    """
    Device text payload.

    The signature shows the page position and the time the page was generated
    (generated_at is already in the display timezone).
    """
    stamp = page.generated_at.strftime("%H:%M:%S")
    return {
        "refreshNow": True,
        "title": f"{page.total_items} to-do items",
        "message": message,
        "signature": f"Page {page.page_number} of {page.total_pages} · {stamp}",
        "icon": "",
        "link": link,
        "taskKey": "",
    }


class QuoteDeviceClient:
    """Pushes text pages to a Quote/0 device through the Dot. open API."""

    def __init__(self, settings, *, client: httpx.AsyncClient | None = None) -> None:
        self._endpoint = settings.quote_api_endpoint
        self._link = settings.quote_link or ""
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.http_timeout_seconds)
        self._headers = {
            "Authorization": f"Bearer {settings.dot_api_key or ''}",
            "Content-Type": "application/json",
        }

    async def push_page(self, page: Page, message: str) -> PushResult:
        payload = build_payload(page, message, link=self._link)

        try:
            resp = await self._client.post(self._endpoint, json=payload, headers=self._headers)
        except httpx.HTTPError as e:
            raise PushError(f"Device request failed: {e.__class__.__name__}: {e}") from e

        try:
            body: Any = resp.json()
        except ValueError:
            body = resp.text

        if resp.status_code != 200:
            logger.warning("Device API answered status=%s body=%r", resp.status_code, body)
        return PushResult(status=resp.status_code, body=body)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
