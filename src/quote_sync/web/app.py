# src/quote_sync/web/app.py

"""
HTTP trigger layer.

Thin adapter around the SyncCoordinator:
- POST /api/webhook  Notion webhook events (forced, deduplicated by event id)
- POST /api/sync     manual sync (GET allowed for cron-style pingers)
- GET  /api/status   queue / rate limit status

Accepted work answers 202 immediately; `?wait=true` awaits the sync outcome.
Duplicates and skipped events answer 200 with success=true so callers do not retry.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from ..core.state import AppState
from ..sync.models import Submission
from .signature import verify_signature

logger = logging.getLogger(__name__)

SYNC_EVENT_TYPES = frozenset(
    {
        "page.created",
        "page.updated",
        "page.deleted",
        "page.undeleted",
        "page.properties_updated",
        "page.content_updated",
        "database_item",
    }
)


def _reply(status_code: int, success: bool, message: str, **extra: Any) -> JSONResponse:
    body: dict[str, Any] = {"success": success, "message": message}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body)


def _wants_wait(request: Request) -> bool:
    return request.query_params.get("wait", "").strip().lower() in {"1", "true", "yes"}


def _missing_config(state: AppState) -> list[str]:
    settings = state.settings
    return settings.missing_required() if hasattr(settings, "missing_required") else []


def is_sync_event(event: dict[str, Any]) -> bool:
    return event.get("object") == "event" or event.get("type") in SYNC_EVENT_TYPES


async def _answer_submission(sub: Submission, *, wait: bool, label: str) -> JSONResponse:
    if not sub.accepted:
        return _reply(200, True, f"{label}: event already processed, skipped.", duplicate=True)

    if not wait:
        return _reply(202, True, f"{label}: sync queued.", accepted=True)

    ok = await sub.wait()
    if ok:
        return _reply(200, True, f"{label}: synced to the Quote device.")
    return _reply(500, False, f"{label}: sync to the Quote device failed.")


def create_router(state: AppState) -> APIRouter:
    router = APIRouter(prefix="/api")

    @router.post("/webhook")
    async def notion_webhook(request: Request) -> JSONResponse:
        raw = await request.body()
        if not raw:
            return _reply(400, False, "Empty request body.")

        try:
            event = json.loads(raw)
        except ValueError:
            return _reply(400, False, "Request body is not valid JSON.")
        if not isinstance(event, dict):
            return _reply(400, False, "Request body must be a JSON object.")

        # Subscription handshake: Notion posts a one-off token to confirm the endpoint.
        token = event.get("verification_token")
        if token:
            logger.info("Received Notion webhook verification token")
            return _reply(200, True, "Verification request received.", token=token)

        secret = getattr(state.settings, "webhook_secret", None)
        if secret:
            signature = request.headers.get("x-notion-signature")
            if not verify_signature(secret, signature, raw):
                logger.warning("Rejected webhook with invalid signature")
                return _reply(401, False, "Invalid Notion webhook signature.")

        missing = _missing_config(state)
        if missing:
            logger.error("Webhook received but configuration is incomplete: %s", ", ".join(missing))
            return _reply(500, False, "Configuration is incomplete.", missing=missing)

        if not is_sync_event(event):
            logger.info("Ignoring Notion event type=%s", event.get("type"))
            return _reply(200, True, "Not a database update event; sync skipped.")

        event_id = str(event.get("id") or "") or None
        logger.info("Notion %s event received (id=%s)", event.get("type"), event_id)
        sub = state.coordinator.submit_webhook_trigger(event_id, forced=True)
        return await _answer_submission(sub, wait=_wants_wait(request), label="webhook")

    @router.api_route("/sync", methods=["GET", "POST"])
    async def manual_sync(request: Request) -> JSONResponse:
        missing = _missing_config(state)
        if missing:
            return _reply(500, False, "Configuration is incomplete.", missing=missing)

        sub = state.coordinator.submit_manual_trigger()
        return await _answer_submission(sub, wait=_wants_wait(request), label="manual")

    @router.get("/status")
    async def queue_status() -> dict[str, Any]:
        return state.coordinator.get_queue_status().as_dict()

    return router


def create_app(state: AppState) -> FastAPI:
    app = FastAPI(title=str(getattr(state.settings, "app_name", "quote-sync")))
    app.include_router(create_router(state))

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return _reply(500, False, "Internal server error.")

    return app
