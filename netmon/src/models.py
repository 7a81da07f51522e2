"""
Pydantic models for connectivity samples and summary statistics.

Defines the enums and the immutable Sample model that represents a single
observation of wireless link state and internet reachability. The presence
rules between fields are enforced at construction time so an inconsistent
sample (e.g. an SSID on a disconnected link, or a ping time on an
unreachable host) cannot be created.

Enum values are the display strings used in the durable log and the HTTP
payloads.

CHANGELOG:
- 2026-10-17: Add LinkReading and PingResult probe answer models (STORY-003)
- 2026-10-17: Initial creation (STORY-002)

TODO:
- None
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator


class LinkState(str, Enum):
    """Wireless link state reported by the probe."""

    CONNECTED = "Connected"
    DISCONNECTED = "Disconnected"
    ERROR = "Error"


class Reachability(str, Enum):
    """Internet reachability of the reference host."""

    REACHABLE = "Reachable"
    NOT_REACHABLE = "Not Reachable"
    PROBE_ERROR = "Ping Error"
    UNKNOWN = "Unknown"


class LinkReading(BaseModel):
    """Raw answer of ``Probe.read_link_state``.

    Attributes:
        state: CONNECTED or DISCONNECTED. A probe may also raise or report
            ERROR; the sampler records both as an Error sample.
        ssid: Network name, when connected.
        signal: Signal level in dBm, when the interface reports it.
    """

    model_config = ConfigDict(frozen=True)

    state: LinkState
    ssid: str | None = None
    signal: int | None = None


class PingResult(BaseModel):
    """Raw answer of ``Probe.probe_reachability``."""

    model_config = ConfigDict(frozen=True)

    alive: bool
    latency_ms: float | None = None


class Sample(BaseModel):
    """One immutable, timestamped connectivity observation.

    Attributes:
        timestamp: When the sample was taken (timezone-aware, UTC).
        link_state: Wireless link state.
        ssid: Network name; only set when the link is CONNECTED.
        signal_strength: Signal level in dBm; only set when CONNECTED and
            reported by the interface.
        reachability: Reference host reachability. UNKNOWN only when the
            link is not CONNECTED.
        round_trip_time_ms: Ping time; only set when REACHABLE.

    Raises:
        pydantic.ValidationError: On any illegal field combination.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    link_state: LinkState
    ssid: str | None = None
    signal_strength: int | None = None
    reachability: Reachability
    round_trip_time_ms: float | None = None

    @model_validator(mode="after")
    def _check_presence_rules(self) -> Sample:
        connected = self.link_state is LinkState.CONNECTED
        if not connected and (self.ssid is not None or self.signal_strength is not None):
            raise ValueError("ssid and signal_strength require a connected link")
        if connected and self.reachability is Reachability.UNKNOWN:
            raise ValueError("reachability UNKNOWN is only valid without a link")
        if not connected and self.reachability in (
            Reachability.REACHABLE,
            Reachability.PROBE_ERROR,
        ):
            raise ValueError(
                f"reachability {self.reachability.value} requires a connected link"
            )
        if self.reachability is not Reachability.REACHABLE:
            if self.round_trip_time_ms is not None:
                raise ValueError("round_trip_time_ms requires a reachable host")
        elif self.round_trip_time_ms is not None and self.round_trip_time_ms < 0:
            raise ValueError("round_trip_time_ms must be non-negative")
        return self


class Summary(BaseModel):
    """Aggregate health metrics over a sequence of samples.

    Every metric is ``None`` for an empty sequence. Float metrics are rounded
    to two decimals.
    """

    sample_count: int
    uptime_percent: float | None
    longest_outage_samples: int | None
    longest_outage_s: float | None
    average_signal: float | None
    average_ping_ms: float | None
