"""
Dual-tier sample store: bounded in-memory window over a durable log.

The window holds the most recent ``capacity`` samples for fast reads by the
statistics engine and the HTTP layer; the oldest sample is evicted first when
it is full. Every sample is also appended to the durable SampleLog, which is
replayed into the window on startup so a restarted process resumes with its
recent history.

Thread safety: the sampler is the only writer. Window mutation and window
snapshots are serialized by a lock, and readers always receive a copy, so a
reader running in a worker thread never observes a partial append.

CHANGELOG:
- 2026-10-17: Initial creation (STORY-006)

TODO:
- None
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from netmon.src.models import Sample
    from netmon.src.sample_log import SampleLog

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SIZE: int = 100
"""Number of samples kept in memory when no capacity is configured."""


class Store:
    """Bounded sample window backed by an append-only durable log.

    Args:
        log: An opened SampleLog used as the durable tier.
        capacity: Maximum number of samples held in the window.
    """

    def __init__(self, log: SampleLog, capacity: int = DEFAULT_WINDOW_SIZE) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._log = log
        self._capacity = capacity
        self._window: deque[Sample] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        """Maximum window length."""
        return self._capacity

    @property
    def log(self) -> SampleLog:
        """The durable tier."""
        return self._log

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    async def append(self, sample: Sample) -> bool:
        """Record a sample in both tiers.

        The window is updated first; the durable write follows. A failed
        durable write is logged and not retried, and the sample stays in the
        window.

        Args:
            sample: The sample to record.

        Returns:
            True if the durable write succeeded, False otherwise.
        """
        with self._lock:
            self._window.append(sample)
        try:
            await self._log.append(sample)
        except Exception:
            logger.error(
                "Durable log write failed for sample at %s",
                sample.timestamp.isoformat(),
                exc_info=True,
            )
            return False
        return True

    async def replay(self, n: int | None = None) -> int:
        """Pre-populate the window from the durable log.

        Intended to run once at startup, before the sampler starts. An
        unreadable log leaves the window empty rather than failing startup.

        Args:
            n: Number of most recent samples to load. Defaults to the
               window capacity.

        Returns:
            Number of samples loaded into the window.
        """
        try:
            recent = await self.load_recent(self._capacity if n is None else n)
        except Exception:
            logger.error(
                "Could not replay durable log, starting with an empty window",
                exc_info=True,
            )
            return 0
        with self._lock:
            self._window.clear()
            self._window.extend(recent)
            loaded = len(self._window)
        logger.info("Replayed %d sample(s) from durable log", loaded)
        return loaded

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    def window(self) -> list[Sample]:
        """Return a snapshot of the window, oldest-first."""
        with self._lock:
            return list(self._window)

    def latest(self) -> Sample | None:
        """Return the most recent sample, or None if nothing was recorded."""
        with self._lock:
            return self._window[-1] if self._window else None

    async def load_recent(self, n: int) -> list[Sample]:
        """Return the *n* most recent durable samples, oldest-first."""
        return await self._log.tail(n)

    async def export_all(self) -> list[Sample]:
        """Return every durable sample, oldest-first."""
        return await self._log.all()
