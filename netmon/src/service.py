"""
Read-side facade handed to the HTTP layer.

Bundles the store, the session tracker and the statistics engine behind the
small set of queries the serving layer needs, so route handlers never touch
the store internals.

CHANGELOG:
- 2026-10-17: Initial creation (STORY-009)

TODO:
- None
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from netmon.src.stats import summarize

if TYPE_CHECKING:
    from netmon.src.models import Sample, Summary
    from netmon.src.session import SessionTracker
    from netmon.src.store import Store


class MonitorService:
    """Queries over the monitor's recorded state.

    Args:
        store: The sample store written by the sampler.
        session: Session tracker for start and last-run times.
        interval_s: Sampling interval, used to express outages in seconds.
    """

    def __init__(self, *, store: Store, session: SessionTracker, interval_s: float) -> None:
        self._store = store
        self._session = session
        self._interval_s = interval_s

    def latest_sample(self) -> Sample | None:
        return self._store.latest()

    def window_samples(self) -> list[Sample]:
        return self._store.window()

    def compute_summary(self) -> Summary:
        """Summarize the current window."""
        return summarize(self._store.window(), self._interval_s)

    def last_run_timestamp(self) -> datetime | None:
        return self._session.last_run

    def session_start_timestamp(self) -> datetime:
        return self._session.started_at

    async def export_all_samples(self) -> list[Sample]:
        """Every sample in the durable log, oldest-first."""
        return await self._store.export_all()

    def database_path(self) -> Path:
        """Location of the durable log file, for raw download."""
        return self._store.log.path
