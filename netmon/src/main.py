"""
Monitor daemon entrypoint.

Wires the components together and runs two concurrent asyncio tasks:
1. **Sampler loop**: probes the link and the reference host every poll
   interval and appends the resulting sample to the Store.
2. **HTTP server**: serves the read API (uvicorn) over the same Store.

Startup replays the most recent durable samples into the window. Graceful
shutdown on SIGTERM/SIGINT sets a shared asyncio.Event; the sampler finishes
its current tick, the HTTP server is asked to exit, and the session tracker
writes the shutdown timestamp on every exit path. The HTTP server failing
(including uvicorn exiting on a port it cannot bind) never stops sampling.

Structured JSON logging is used for all events.

CHANGELOG:
- 2026-10-17: Keep sampling when the HTTP server fails or stops on its own
- 2026-10-17: Fall back to an in-memory log when the database cannot be opened
- 2026-10-17: Serve the read API from the daemon process (STORY-010)
- 2026-10-17: Initial creation (STORY-012)

TODO:
- None
"""

from __future__ import annotations

import asyncio
import json
import logging
import signal
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import uvicorn

from netmon.src.sample_log import SampleLog

if TYPE_CHECKING:
    from netmon.src.sampler import Sampler
    from netmon.src.session import SessionTracker

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Structured JSON logging setup
# ---------------------------------------------------------------------------


def configure_logging(level: int = logging.INFO) -> None:
    """Configure structured JSON logging for the monitor daemon.

    Sets up the root logger with a JSON-formatted handler writing to stderr.
    """

    class _JsonFormatter(logging.Formatter):
        """Minimal JSON log formatter."""

        def format(self, record: logging.LogRecord) -> str:
            log_entry = {
                "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "msg": record.getMessage(),
            }
            if record.exc_info and record.exc_info[1] is not None:
                log_entry["exception"] = self.formatException(record.exc_info)
            return json.dumps(log_entry)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def log_config_summary(settings: object) -> None:
    """Log a config summary at startup.

    Args:
        settings: A MonitorSettings instance (or any object with the same attrs).
    """
    logger.info(
        "Network monitor starting with config: "
        "reference_host=%s, poll_interval_s=%s, probe_timeout_s=%s, "
        "window_size=%s, db_path=%s, last_run_path=%s, wifi_interface=%s, "
        "api_host=%s, api_port=%s",
        settings.reference_host,  # type: ignore[attr-defined]
        settings.poll_interval_s,  # type: ignore[attr-defined]
        settings.probe_timeout_s,  # type: ignore[attr-defined]
        settings.window_size,  # type: ignore[attr-defined]
        settings.db_path,  # type: ignore[attr-defined]
        settings.last_run_path,  # type: ignore[attr-defined]
        settings.wifi_interface,  # type: ignore[attr-defined]
        settings.api_host,  # type: ignore[attr-defined]
        settings.api_port,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Startup helpers
# ---------------------------------------------------------------------------


async def open_sample_log(path: str) -> SampleLog:
    """Open the durable log at *path*, or an in-memory log if that fails.

    An unreadable database must not stop the monitor; samples are then kept
    for this process only.
    """
    log = SampleLog(path)
    try:
        await log.open()
    except Exception:
        logger.error(
            "Could not open durable log %s, continuing with an in-memory log",
            path,
            exc_info=True,
        )
        await log.close()
        log = SampleLog(":memory:")
        await log.open()
    return log


# ---------------------------------------------------------------------------
# Concurrent runner with graceful shutdown
# ---------------------------------------------------------------------------


async def _serve(server: uvicorn.Server, shutdown_event: asyncio.Event) -> None:
    """Serve the read API. A failing server never stops sampling.

    uvicorn exits with ``SystemExit`` when it cannot bind its port, so that
    is caught along with ordinary errors. A server that returns because it
    caught the shutdown signal itself (``should_exit``) ends the run.
    """
    try:
        await server.serve()
    except (SystemExit, Exception):
        logger.error(
            "HTTP server failed, sampling continues without the read API",
            exc_info=True,
        )
        return
    if server.should_exit:
        shutdown_event.set()
    elif not shutdown_event.is_set():
        logger.error("HTTP server stopped, sampling continues without the read API")


async def run_monitor(
    *,
    sampler: Sampler,
    session: SessionTracker,
    shutdown_event: asyncio.Event,
    server: uvicorn.Server | None = None,
) -> None:
    """Run the sampler (and optionally the HTTP server) until shutdown.

    Returns when *shutdown_event* is set. The HTTP server failing or
    stopping on its own leaves the sampler running. The session tracker
    records the shutdown time on every exit path.

    Args:
        sampler: The periodic sampler.
        session: Session tracker written on exit.
        shutdown_event: Event to signal graceful shutdown.
        server: uvicorn server for the read API, or None to run headless.
    """
    sampler_task = asyncio.create_task(sampler.run(shutdown_event))
    server_task = (
        asyncio.create_task(_serve(server, shutdown_event))
        if server is not None
        else None
    )
    try:
        await shutdown_event.wait()
        if server is not None:
            server.should_exit = True
        await sampler_task
        if server_task is not None:
            await server_task
    finally:
        for task in (sampler_task, server_task):
            if task is not None and not task.done():
                task.cancel()
        session.record_shutdown()
        logger.info("Shutdown complete")


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


async def async_main() -> None:
    """Async entrypoint: load config, build components, run until signalled.

    Sets up SIGTERM/SIGINT handlers to trigger graceful shutdown.
    """
    configure_logging()

    from netmon.src.api import create_app
    from netmon.src.config import MonitorSettings
    from netmon.src.probe import SystemProbe
    from netmon.src.sampler import Sampler
    from netmon.src.service import MonitorService
    from netmon.src.session import SessionTracker
    from netmon.src.store import Store

    settings = MonitorSettings()
    log_config_summary(settings)

    shutdown_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(
            sig,
            lambda: _handle_signal(shutdown_event),
        )

    session = SessionTracker(settings.last_run_path)
    sample_log = await open_sample_log(settings.db_path)
    try:
        store = Store(sample_log, capacity=settings.window_size)
        await store.replay()

        sampler = Sampler(
            probe=SystemProbe(settings.wifi_interface),
            store=store,
            reference_host=settings.reference_host,
            interval_s=settings.poll_interval_s,
            timeout_s=settings.probe_timeout_s,
        )
        service = MonitorService(
            store=store,
            session=session,
            interval_s=settings.poll_interval_s,
        )
        server = uvicorn.Server(
            uvicorn.Config(
                create_app(service),
                host=settings.api_host,
                port=settings.api_port,
                log_config=None,
            )
        )
        await run_monitor(
            sampler=sampler,
            session=session,
            shutdown_event=shutdown_event,
            server=server,
        )
    finally:
        await sample_log.close()


def _handle_signal(shutdown_event: asyncio.Event) -> None:
    """Handle SIGTERM/SIGINT by setting the shutdown event.

    Args:
        shutdown_event: The event to set for graceful shutdown.
    """
    logger.info("Received shutdown signal, initiating graceful shutdown")
    shutdown_event.set()


def main() -> None:
    """Synchronous entrypoint for the monitor daemon."""
    asyncio.run(async_main())


if __name__ == "__main__":
    main()
