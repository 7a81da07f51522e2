"""
Session tracker for the monitor daemon.

Records when the current process started and persists a "last active"
timestamp to a small text file whenever the daemon shuts down. On startup the
previous value, if any, is exposed read-only as the last run time.

Neither reading nor writing the file is fatal: the value is diagnostic only,
so failures are logged and the daemon carries on.

CHANGELOG:
- 2026-10-17: Initial creation (STORY-008)

TODO:
- None
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)


class SessionTracker:
    """Tracks session start time and the previous run's shutdown time.

    Args:
        path: Filesystem path for the last-run file. Accepts str or Path.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.started_at: datetime = datetime.now(tz=UTC)
        self._last_run: datetime | None = self._read_last_run()

    @property
    def last_run(self) -> datetime | None:
        """Shutdown time recorded by the previous run, if any."""
        return self._last_run

    def record_shutdown(self) -> bool:
        """Overwrite the last-run file with the current time.

        Returns:
            True if the file was written, False if the write failed.
        """
        try:
            self.path.write_text(datetime.now(tz=UTC).isoformat())
        except OSError:
            logger.warning("Failed to write last-run file %s", self.path, exc_info=True)
            return False
        return True

    def _read_last_run(self) -> datetime | None:
        if not self.path.exists():
            return None
        try:
            value = datetime.fromisoformat(self.path.read_text().strip())
        except (OSError, ValueError):
            logger.warning("Failed to read last-run file %s", self.path, exc_info=True)
            return None
        logger.info("Last execution was on %s", value.isoformat())
        return value
