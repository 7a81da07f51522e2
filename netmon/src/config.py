"""
Monitor daemon configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
All configuration values come from environment variables or .env files;
every field has a default so the daemon starts with no configuration.

CHANGELOG:
- 2026-10-17: Count the probe grace against the poll interval
- 2026-10-17: Initial creation (STORY-001)

TODO:
- None
"""

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings

from netmon.src.sampler import PROBE_GRACE_S


class MonitorSettings(BaseSettings):
    """Network monitor configuration.

    Attributes:
        reference_host: Host pinged to decide internet reachability.
        poll_interval_s: Seconds between sampling ticks (default 5).
        probe_timeout_s: Upper bound for a single probe call (default 2).
            Together with the probe grace it must be shorter than the poll
            interval so a slow tick never delays the next one.
        window_size: Capacity of the in-memory sample window (default 100).
        db_path: SQLite file holding the durable sample log.
        last_run_path: Text file holding the last shutdown timestamp.
        wifi_interface: Wireless interface passed to ``iwconfig``. When
            unset, the first interface reporting an ESSID is used.
        api_host: Bind address for the HTTP read API.
        api_port: Port for the HTTP read API.
    """

    reference_host: str = "8.8.8.8"
    poll_interval_s: float = 5.0
    probe_timeout_s: float = 2.0
    window_size: int = 100
    db_path: str = "network_logs.db"
    last_run_path: str = "last-run.txt"
    wifi_interface: str | None = None
    api_host: str = "0.0.0.0"
    api_port: int = 3000

    @field_validator("reference_host")
    @classmethod
    def reference_host_must_not_be_empty(cls, v: str) -> str:
        """Reject an empty reference host."""
        if not v.strip():
            raise ValueError("REFERENCE_HOST must not be empty")
        return v.strip()

    @field_validator("poll_interval_s", "probe_timeout_s")
    @classmethod
    def durations_must_be_positive(cls, v: float) -> float:
        """Validate that intervals and timeouts are strictly positive."""
        if v <= 0:
            raise ValueError("POLL_INTERVAL_S and PROBE_TIMEOUT_S must be > 0")
        return v

    @field_validator("window_size")
    @classmethod
    def window_size_must_be_positive(cls, v: int) -> int:
        """Validate the window holds at least one sample."""
        if v < 1:
            raise ValueError("WINDOW_SIZE must be >= 1")
        return v

    @field_validator("api_port")
    @classmethod
    def api_port_must_be_valid(cls, v: int) -> int:
        """Validate HTTP port is in valid range."""
        if v < 1 or v > 65535:
            raise ValueError("API_PORT must be between 1 and 65535")
        return v

    @model_validator(mode="after")
    def _timeout_shorter_than_interval(self) -> "MonitorSettings":
        """A tick, probe grace included, may not outlive its interval."""
        if self.probe_timeout_s + PROBE_GRACE_S >= self.poll_interval_s:
            raise ValueError(
                f"PROBE_TIMEOUT_S plus {PROBE_GRACE_S}s grace must be shorter "
                "than POLL_INTERVAL_S"
            )
        return self

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}
