# src/quote_sync/core/errors.py

from __future__ import annotations


class SyncError(RuntimeError):
    """Base class for collaborator failures surfaced to the orchestrator."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class FetchError(SyncError):
    """Upstream unreachable, rejected the request, or returned a malformed body."""


class PushError(SyncError):
    """The display device could not be reached (network error or timeout)."""


def friendly_sync_error_message(exc: BaseException) -> str:
    """Short human-readable description for console/HTTP replies."""
    if isinstance(exc, FetchError):
        base = "Could not fetch items from Notion"
    elif isinstance(exc, PushError):
        base = "Could not reach the Quote device"
    else:
        return f"Unexpected error: {exc.__class__.__name__}"

    status = getattr(exc, "status", None)
    return f"{base} (HTTP {status})." if status else f"{base}."
