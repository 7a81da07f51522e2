"""
Shared test fixtures for network monitor tests.

Provides environment isolation for MonitorSettings and a factory for
building consistent samples.

CHANGELOG:
- 2026-10-17: Add sample factory fixture (STORY-006)
- 2026-10-17: Initial creation (STORY-001)

TODO:
- None
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest
from netmon.src.models import LinkState, Reachability, Sample

# All MonitorSettings environment variable names, used for cleanup.
_ALL_MONITOR_ENV_VARS = (
    "REFERENCE_HOST",
    "POLL_INTERVAL_S",
    "PROBE_TIMEOUT_S",
    "WINDOW_SIZE",
    "DB_PATH",
    "LAST_RUN_PATH",
    "WIFI_INTERFACE",
    "API_HOST",
    "API_PORT",
)

_BASE_TS = datetime(2026, 10, 17, 9, 0, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _clean_monitor_env(monkeypatch: pytest.MonkeyPatch, tmp_path: str) -> None:
    """Remove all monitor env vars and isolate from .env files before each test."""
    for var in _ALL_MONITOR_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def make_sample() -> Callable[..., Sample]:
    """Return a factory building valid samples.

    ``make_sample(i, reachability)`` produces a sample ``i`` intervals of
    5 seconds after a fixed base time. Connected samples carry an SSID and
    signal; reachable ones a round-trip time.
    """

    def _factory(
        index: int = 0,
        reachability: Reachability = Reachability.REACHABLE,
        *,
        link_state: LinkState | None = None,
        signal: int | None = -55,
        rtt_ms: float | None = 12.5,
    ) -> Sample:
        if link_state is None:
            link_state = (
                LinkState.ERROR
                if reachability is Reachability.UNKNOWN
                else LinkState.CONNECTED
            )
        connected = link_state is LinkState.CONNECTED
        return Sample(
            timestamp=_BASE_TS + timedelta(seconds=5 * index),
            link_state=link_state,
            ssid="HomeNet" if connected else None,
            signal_strength=signal if connected else None,
            reachability=reachability,
            round_trip_time_ms=rtt_ms if reachability is Reachability.REACHABLE else None,
        )

    return _factory
