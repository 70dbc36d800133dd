# src/quote_sync/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs on one event loop:
- the recurring sync scheduler (optional, QUOTE_SYNC_POLL_INTERVAL_SECONDS > 0),
- the HTTP trigger server (optional),
- the console connector (optional).
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal

from ..cli.bootstrap import create_initial_state, shutdown_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..sync.scheduler import run_sync_scheduler

logger = logging.getLogger(__name__)


async def _serve_http(state) -> None:
    import uvicorn

    from ..web.app import create_app

    settings = state.settings
    config = uvicorn.Config(
        create_app(state),
        host=settings.web_host,
        port=int(settings.web_port),
        log_config=None,  # keep our handlers
        lifespan="off",
    )
    server = uvicorn.Server(config)
    # Signals are handled by _run(); uvicorn must not replace them.
    server.install_signal_handlers = lambda: None  # type: ignore[method-assign]
    logger.info("HTTP triggers listening on http://%s:%s", settings.web_host, settings.web_port)
    await server.serve()


async def _run(settings) -> None:
    state = create_initial_state(settings=settings)
    stop = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, stop.set)

    if settings.poll_interval_seconds > 0:
        state.background.append(
            asyncio.create_task(
                run_sync_scheduler(state.coordinator, interval_seconds=settings.poll_interval_seconds),
                name="sync-scheduler",
            )
        )

    if settings.web_enabled:
        state.background.append(asyncio.create_task(_serve_http(state), name="http-server"))

    if settings.console_enabled:
        console = asyncio.create_task(run_console_loop(state), name="console")
        console.add_done_callback(lambda _t: stop.set())
        state.background.append(console)

    if not state.background:
        logger.warning("Nothing to run: enable the web server, the console or the scheduler.")
        stop.set()
    else:
        logger.info("Running. Press Ctrl+C to stop.")

    try:
        await stop.wait()
    finally:
        logger.info("Shutting down...")
        for task in state.background:
            task.cancel()
        await asyncio.gather(*state.background, return_exceptions=True)
        await shutdown_state(state)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        pass
    logger.info("Bye.")


if __name__ == "__main__":
    main()
