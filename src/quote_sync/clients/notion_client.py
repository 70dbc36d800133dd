# src/quote_sync/clients/notion_client.py

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.errors import FetchError

logger = logging.getLogger(__name__)

_MAX_QUERY_PAGES = 20


def build_status_filter(property_name: str, property_type: str, value: str) -> dict[str, Any]:
    """Notion filter matching `value` for the given status property type."""
    if property_type in ("select", "status"):
        return {"property": property_name, property_type: {"equals": value}}
    if property_type == "rich_text":
        return {"property": property_name, "rich_text": {"contains": value}}
    raise FetchError(f"Unsupported status property type: {property_type}")


def _plain_text(parts: Any) -> str:
    if not isinstance(parts, list):
        return ""
    return "".join(str(p.get("plain_text", "")) for p in parts if isinstance(p, dict))


def extract_title(page: dict[str, Any], title_property: str) -> str:
    props = page.get("properties") or {}
    prop = props.get(title_property)
    if not isinstance(prop, dict):
        return ""

    if "title" in prop:
        return _plain_text(prop.get("title"))
    if "rich_text" in prop:
        return _plain_text(prop.get("rich_text"))
    if "select" in prop:
        select = prop.get("select") or {}
        return str(select.get("name") or "")
    return ""


class NotionItemSource:
    """
    Reads "in progress" item titles from a Notion database.

    The status filter is built from the live schema, because the same logical
    column may be a select, status or rich_text property.
    """

    def __init__(self, settings, *, client: httpx.AsyncClient | None = None) -> None:
        self._database_id = settings.notion_database_id or ""
        self._status_property = settings.notion_status_property
        self._title_property = settings.notion_title_property
        self._status_value = settings.notion_status_value

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=settings.notion_base_url.rstrip("/") + "/",
            timeout=settings.http_timeout_seconds,
        )
        self._headers = {
            "Authorization": f"Bearer {settings.notion_api_key or ''}",
            "Notion-Version": settings.notion_version,
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            resp = await self._client.request(method, path, json=json, headers=self._headers)
        except httpx.HTTPError as e:
            raise FetchError(f"Notion request failed: {e.__class__.__name__}: {e}") from e

        if resp.status_code != 200:
            logger.error("Notion API error: status=%s body=%s", resp.status_code, resp.text[:300])
            raise FetchError(f"Notion API returned {resp.status_code}", status=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            raise FetchError("Notion API returned a non-JSON body", status=resp.status_code) from e
        if not isinstance(data, dict):
            raise FetchError("Notion API returned an unexpected body", status=resp.status_code)
        return data

    async def fetch_items(self) -> list[str]:
        if not self._database_id:
            raise FetchError("Notion database id is not configured")

        database = await self._request("GET", f"databases/{self._database_id}")
        schema = database.get("properties") or {}

        status_prop = schema.get(self._status_property)
        if not isinstance(status_prop, dict):
            raise FetchError(f"Status property not found in database: {self._status_property}")

        prop_type = str(status_prop.get("type") or "")
        logger.debug("Status property %r has type %s", self._status_property, prop_type)
        query: dict[str, Any] = {
            "filter": build_status_filter(self._status_property, prop_type, self._status_value),
        }

        titles: list[str] = []
        for _ in range(_MAX_QUERY_PAGES):
            data = await self._request("POST", f"databases/{self._database_id}/query", json=query)
            results = data.get("results")
            if not isinstance(results, list):
                raise FetchError("Notion query response has no results list")

            for page in results:
                if not isinstance(page, dict):
                    continue
                title = extract_title(page, self._title_property).strip()
                if title:
                    titles.append(title)

            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                break
            query["start_cursor"] = cursor
        else:
            logger.warning("Stopped reading Notion results after %d pages", _MAX_QUERY_PAGES)

        logger.info("Notion returned %d in-progress items", len(titles))
        return titles

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
