# src/quote_sync/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import cast

from ..core.state import AppState

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /sync, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Must run on the event loop thread: sync commands enqueue tasks.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("  /exit - Quit.")
        return "\n".join(lines)


registry = CommandRegistry()


def _report_to(emit: CommandEmitter | None, label: str) -> Callable[[bool], None] | None:
    if emit is None:
        return None

    def _done(success: bool) -> None:
        emit(f"[SYNC] {label}: {'done' if success else 'FAILED (see log)'}")

    return _done


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    status = state.coordinator.get_queue_status()
    settings = state.settings
    missing = settings.missing_required() if hasattr(settings, "missing_required") else []
    return (
        "Status:\n"
        f"  Queue length: {status.queue_length}\n"
        f"  Draining: {'yes' if status.is_draining else 'no'}\n"
        f"  Device calls in the last minute: {status.recent_call_count}"
        f"/{state.coordinator.rate_limiter.max_calls}\n"
        f"  Page size: {getattr(settings, 'page_size', '?')}\n"
        f"  Missing config: {', '.join(missing) if missing else 'none'}"
    )


def cmd_sync(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /sync  -> queue a normal (non-forced) sync
    """
    sub = state.coordinator.submit_manual_trigger(on_complete=_report_to(emit, "manual sync"))
    logger.debug("Manual sync requested from console (accepted=%s)", sub.accepted)
    return f"Manual sync queued (queue length: {len(state.coordinator.queue)})."


def cmd_force(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /force  -> queue a forced sync that jumps ahead of normal ones
    """
    sub = state.coordinator.submit_webhook_trigger(
        None,
        forced=True,
        on_complete=_report_to(emit, "forced sync"),
    )
    logger.debug("Forced sync requested from console (accepted=%s)", sub.accepted)
    return "Forced sync queued ahead of normal syncs."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show queue / rate limit status.")
registry.register("sync", cmd_sync, help_text="Queue a sync of the current page.")
registry.register("force", cmd_force, help_text="Queue a forced sync (served before normal syncs).")
