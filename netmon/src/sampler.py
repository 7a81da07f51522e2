"""
Periodic connectivity sampler.

Each tick reads the wireless link state, probes the reference host when a
link is present, turns the outcome into an immutable Sample, and appends it
to the Store. Designed to be robust:

- Probe failures are recorded as sample state, never raised.
- Both probe calls share one deadline of timeout_s + PROBE_GRACE_S, so a
  hung tool cannot stall the schedule.
- No retries inside a tick; the next tick is the retry.
- The loop stops cleanly when its shutdown event is set.

State mapping:

=============  =====================  ==================
link read      reachability probe     reachability
=============  =====================  ==================
raises         not attempted          UNKNOWN (link ERROR)
ERROR          not attempted          UNKNOWN (link ERROR)
DISCONNECTED   not attempted          NOT_REACHABLE
CONNECTED      alive                  REACHABLE
CONNECTED      not alive              NOT_REACHABLE
CONNECTED      raises / times out     PROBE_ERROR
=============  =====================  ==================

CHANGELOG:
- 2026-10-17: One deadline per tick; map ERROR link readings to Error/Unknown
- 2026-10-17: Bound link reads by the probe timeout as well
- 2026-10-17: Initial creation (STORY-004)

TODO:
- None
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from netmon.src.models import LinkState, Reachability, Sample
from netmon.src.probe import UNKNOWN_SSID

if TYPE_CHECKING:
    from netmon.src.probe import Probe
    from netmon.src.store import Store

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_INTERVAL_S: float = 5.0
"""Seconds between sampling ticks."""

DEFAULT_TIMEOUT_S: float = 2.0
"""Upper bound for each probe call in seconds."""

DEFAULT_REFERENCE_HOST: str = "8.8.8.8"
"""Host whose reachability stands for internet reachability."""

PROBE_GRACE_S: float = 0.5
"""Extra time granted over the probe's own timeout before the call is abandoned."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class Sampler:
    """Drives the probe on a fixed interval and feeds the store.

    Args:
        probe: Link and reachability probe.
        store: Store receiving every sample.
        reference_host: Host probed for reachability.
        interval_s: Seconds between ticks.
        timeout_s: Timeout for each probe call.
        clock: Returns the sample timestamp. Injected for tests.
    """

    def __init__(
        self,
        *,
        probe: Probe,
        store: Store,
        reference_host: str = DEFAULT_REFERENCE_HOST,
        interval_s: float = DEFAULT_INTERVAL_S,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._probe = probe
        self._store = store
        self._reference_host = reference_host
        self._interval_s = interval_s
        self._timeout_s = timeout_s
        self._clock = clock
        self._ticks: int = 0

    @property
    def interval_s(self) -> float:
        """Seconds between ticks."""
        return self._interval_s

    @property
    def ticks(self) -> int:
        """Number of completed ticks."""
        return self._ticks

    async def tick(self) -> Sample:
        """Take one sample and append it to the store.

        Returns:
            The sample that was recorded.
        """
        timestamp = self._clock()
        sample = await self._observe(timestamp)
        await self._store.append(sample)
        self._ticks += 1
        logger.debug(
            "Sample recorded: link=%s reachability=%s rtt_ms=%s",
            sample.link_state.value,
            sample.reachability.value,
            sample.round_trip_time_ms,
        )
        return sample

    async def run(self, shutdown_event: asyncio.Event) -> None:
        """Tick every ``interval_s`` seconds until *shutdown_event* is set.

        The interval is measured from the start of a tick, so a slow probe
        shortens the following wait instead of shifting the schedule.
        """
        loop = asyncio.get_running_loop()
        logger.info(
            "Sampler started (interval=%ss, host=%s)",
            self._interval_s,
            self._reference_host,
        )
        while not shutdown_event.is_set():
            started = loop.time()
            try:
                await self.tick()
            except Exception:
                logger.error("Sampling tick error", exc_info=True)
            remaining = max(0.0, self._interval_s - (loop.time() - started))
            # Use wait with timeout so we can check shutdown between sleeps
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(shutdown_event.wait(), timeout=remaining)
        logger.info("Sampler stopped after %d tick(s)", self._ticks)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _observe(self, timestamp: datetime) -> Sample:
        # Both probe calls share one deadline so a tick never outlives
        # timeout_s + PROBE_GRACE_S.
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._timeout_s + PROBE_GRACE_S
        try:
            reading = await asyncio.wait_for(
                self._probe.read_link_state(), timeout=self._timeout_s
            )
        except Exception:
            logger.warning("Wi-Fi link read failed", exc_info=True)
            return Sample(
                timestamp=timestamp,
                link_state=LinkState.ERROR,
                reachability=Reachability.UNKNOWN,
            )

        if reading.state is LinkState.ERROR:
            logger.warning("Wi-Fi link read reported an error")
            return Sample(
                timestamp=timestamp,
                link_state=LinkState.ERROR,
                reachability=Reachability.UNKNOWN,
            )
        if reading.state is not LinkState.CONNECTED:
            return Sample(
                timestamp=timestamp,
                link_state=LinkState.DISCONNECTED,
                reachability=Reachability.NOT_REACHABLE,
            )

        reachability = Reachability.NOT_REACHABLE
        rtt_ms: float | None = None
        try:
            result = await asyncio.wait_for(
                self._probe.probe_reachability(self._reference_host, self._timeout_s),
                timeout=max(0.0, deadline - loop.time()),
            )
        except Exception:
            logger.warning(
                "Reachability probe to %s failed", self._reference_host, exc_info=True
            )
            reachability = Reachability.PROBE_ERROR
        else:
            if result.alive:
                reachability = Reachability.REACHABLE
                rtt_ms = result.latency_ms

        return Sample(
            timestamp=timestamp,
            link_state=LinkState.CONNECTED,
            ssid=reading.ssid or UNKNOWN_SSID,
            signal_strength=reading.signal,
            reachability=reachability,
            round_trip_time_ms=rtt_ms,
        )
