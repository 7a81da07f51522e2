"""
HTTP read API for the network monitor.

Exposes the recorded samples, the summary statistics and session information
as JSON. The API is read-only: the sampler is the only writer. The
MonitorService is stored on ``app.state`` by :func:`create_app` and injected
into route handlers via ``Depends``.

Routes:
- GET /health: liveness, ``{"status": "ok"}``.
- GET /status: most recent sample, or ``{}`` before the first tick.
- GET /log: the in-memory window, oldest-first.
- GET /summary: uptime, outage and average metrics over the window.
- GET /last-run: shutdown time of the previous run.
- GET /session-info: start time of this run and the current time.
- GET /export: every sample in the durable log.
- GET /download-db: the SQLite durable log file as an attachment.

CHANGELOG:
- 2026-10-17: Add /export and /download-db bulk export routes (STORY-011)
- 2026-10-17: Initial creation (STORY-010)

TODO:
- None
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.responses import FileResponse

from netmon.src.models import Sample, Summary
from netmon.src.service import MonitorService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["monitor"])


def get_service(request: Request) -> MonitorService:
    """Return the MonitorService attached to the application."""
    return request.app.state.service


# Type alias for injecting the monitor facade via FastAPI Depends().
Service = Annotated[MonitorService, Depends(get_service)]


def _iso(value: datetime | None) -> str | None:
    return None if value is None else value.isoformat()


@router.get("/health")
async def health() -> dict[str, str]:
    """Return a simple health status."""
    return {"status": "ok"}


@router.get("/status")
async def status(service: Service) -> dict[str, Any]:
    """Return the most recent sample, or an empty object if none yet."""
    sample = service.latest_sample()
    if sample is None:
        return {}
    return sample.model_dump(mode="json")


@router.get("/log", response_model=list[Sample])
async def window_log(service: Service) -> list[Sample]:
    """Return the in-memory sample window, oldest-first."""
    return service.window_samples()


@router.get("/summary", response_model=Summary)
async def summary(service: Service) -> Summary:
    """Return summary statistics over the in-memory window."""
    return service.compute_summary()


@router.get("/last-run")
async def last_run(service: Service) -> dict[str, str | None]:
    """Return the shutdown time recorded by the previous run."""
    return {"last_run_time": _iso(service.last_run_timestamp())}


@router.get("/session-info")
async def session_info(service: Service) -> dict[str, str | None]:
    """Return this session's start time alongside the current time."""
    return {
        "session_start": _iso(service.session_start_timestamp()),
        "current_time": datetime.now(tz=UTC).isoformat(),
    }


@router.get("/export", response_model=list[Sample])
async def export(service: Service) -> list[Sample]:
    """Return every sample in the durable log, oldest-first."""
    return await service.export_all_samples()


@router.get("/download-db")
async def download_db(service: Service) -> FileResponse:
    """Send the SQLite durable log file as an attachment.

    Raises:
        HTTPException: 500 when the database file does not exist.
    """
    path = service.database_path()
    if not path.is_file():
        logger.error("Download requested but database file %s is missing", path)
        raise HTTPException(status_code=500, detail="Error downloading DB")
    return FileResponse(
        path,
        media_type="application/octet-stream",
        filename="network_logs.db",
    )


def create_app(service: MonitorService) -> FastAPI:
    """Build the FastAPI application around *service*.

    Args:
        service: The monitor facade queried by every route.
    """
    app = FastAPI(
        title="Network Monitor API",
        description="Wi-Fi link and internet reachability history.",
        version="0.1.0",
    )
    app.state.service = service
    app.include_router(router)
    return app
