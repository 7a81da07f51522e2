"""
Append-only durable sample log using async SQLite.

Every sample the monitor records is appended here and never removed, so the
monitoring history survives process restarts. Rows are indexed by an
autoincrement primary key that follows insertion order, which makes "last N"
queries an index walk instead of a scan of the whole history.

Operations:
- append(sample): INSERT one sample row.
- tail(n): SELECT the n most recent rows, returned oldest-first.
- all(): SELECT every row, oldest-first (bulk export).
- count(): SELECT COUNT(*) of recorded samples.
- close(): Close the underlying database connection.

Supports async context manager protocol for clean resource management.

CHANGELOG:
- 2026-10-17: Skip unreadable rows on read instead of failing the whole query
- 2026-10-17: Initial creation (STORY-005)

TODO:
- None
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite
from pydantic import ValidationError

from netmon.src.models import Sample

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS samples (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    ts TEXT NOT NULL,
    link_state TEXT NOT NULL,
    ssid TEXT,
    signal INTEGER,
    reachability TEXT NOT NULL,
    rtt_ms REAL
);
"""

_INSERT_SQL = """\
INSERT INTO samples (ts, link_state, ssid, signal, reachability, rtt_ms)
VALUES (?, ?, ?, ?, ?, ?);
"""

_TAIL_SQL = """\
SELECT id, ts, link_state, ssid, signal, reachability, rtt_ms
FROM samples
ORDER BY id DESC
LIMIT ?;
"""

_ALL_SQL = """\
SELECT id, ts, link_state, ssid, signal, reachability, rtt_ms
FROM samples
ORDER BY id ASC;
"""

_COUNT_SQL = "SELECT COUNT(*) FROM samples;"


def _to_row(sample: Sample) -> tuple[Any, ...]:
    return (
        sample.timestamp.isoformat(),
        sample.link_state.value,
        sample.ssid,
        sample.signal_strength,
        sample.reachability.value,
        sample.round_trip_time_ms,
    )


def _from_rows(rows: list[Any]) -> list[Sample]:
    """Rebuild samples from table rows, skipping rows that fail validation."""
    samples: list[Sample] = []
    for row in rows:
        try:
            samples.append(
                Sample(
                    timestamp=datetime.fromisoformat(row[1]),
                    link_state=row[2],
                    ssid=row[3],
                    signal_strength=row[4],
                    reachability=row[5],
                    round_trip_time_ms=row[6],
                )
            )
        except (ValidationError, TypeError, ValueError):
            logger.warning("Skipping unreadable sample log row id=%s", row[0])
    return samples


class SampleLog:
    """Durable append-only sample log backed by a SQLite database.

    Uses WAL journal mode so the HTTP layer can read (e.g. bulk export)
    while the sampler appends.

    Args:
        path: Filesystem path for the SQLite database file.
              Accepts ``str`` or ``pathlib.Path``.

    Usage::

        async with SampleLog(path="network_logs.db") as log:
            await log.append(sample)
            recent = await log.tail(100)
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._db: aiosqlite.Connection | None = None

    @property
    def path(self) -> Path:
        """Location of the SQLite database file."""
        return self._path

    async def open(self) -> None:
        """Open the SQLite connection and initialize the schema."""
        self._db = await aiosqlite.connect(str(self._path))
        await self._db.execute("PRAGMA journal_mode=WAL;")
        await self._db.execute(_CREATE_TABLE_SQL)
        await self._db.commit()

    async def close(self) -> None:
        """Close the underlying SQLite connection.

        After calling close, no further operations should be performed
        on this SampleLog instance.
        """
        if self._db is not None:
            await self._db.close()
            self._db = None

    async def __aenter__(self) -> SampleLog:
        """Enter async context manager: open the database."""
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context manager: close the database."""
        await self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def append(self, sample: Sample) -> None:
        """Insert one sample at the end of the log.

        Args:
            sample: The sample to persist.
        """
        assert self._db is not None, "SampleLog not opened. Call open() or use async with."
        await self._db.execute(_INSERT_SQL, _to_row(sample))
        await self._db.commit()

    async def tail(self, n: int) -> list[Sample]:
        """Return the *n* most recently appended samples, oldest-first.

        Args:
            n: Maximum number of samples to return.

        Returns:
            Up to *n* samples in insertion order. Empty list when the log is
            empty or n < 1.
        """
        assert self._db is not None, "SampleLog not opened. Call open() or use async with."
        if n < 1:
            return []
        cursor = await self._db.execute(_TAIL_SQL, (n,))
        rows = await cursor.fetchall()
        return _from_rows(list(reversed(rows)))

    async def all(self) -> list[Sample]:
        """Return every sample ever appended, oldest-first."""
        assert self._db is not None, "SampleLog not opened. Call open() or use async with."
        cursor = await self._db.execute(_ALL_SQL)
        rows = await cursor.fetchall()
        return _from_rows(list(rows))

    async def count(self) -> int:
        """Return the number of rows in the log."""
        assert self._db is not None, "SampleLog not opened. Call open() or use async with."
        cursor = await self._db.execute(_COUNT_SQL)
        row = await cursor.fetchone()
        return row[0]
