"""
Link and reachability probe for the network monitor.

Defines the ``Probe`` protocol consumed by the sampler and ``SystemProbe``,
the default implementation that shells out to the host's wireless and ping
tools:

- ``read_link_state()``: parses ``iwconfig`` output for the ESSID and signal
  level of the wireless interface.
- ``probe_reachability(host, timeout_s)``: sends a single ICMP echo with
  ``ping`` and parses the round-trip time.

Both operations may raise; the sampler converts failures into sample state,
so the probe itself never decides what a failure means.

CHANGELOG:
- 2026-10-17: Reap the killed child so its transport is closed
- 2026-10-17: Kill the child process when a probe call is cancelled
- 2026-10-17: Initial creation (STORY-003)

TODO:
- None
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import math
import re
from typing import Protocol

from netmon.src.models import LinkReading, LinkState, PingResult

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Output patterns
# ---------------------------------------------------------------------------

_BLOCK_SPLIT_RE = re.compile(r"\n(?=\S)")
_ESSID_RE = re.compile(r'ESSID:"(.*?)"')
_SIGNAL_RE = re.compile(r"Signal level=(-?\d+)\s*dBm")
_PING_TIME_RE = re.compile(r"time[=<]([0-9.]+)\s*ms")

UNKNOWN_SSID = "Unknown"
"""Recorded when the link is up but the interface reports an empty ESSID."""


class ProbeError(Exception):
    """Raised when a probe command cannot be run or its output is unusable."""


class Probe(Protocol):
    """Capability the sampler uses to observe the network."""

    async def read_link_state(self) -> LinkReading:
        """Return the current wireless link state. May raise."""
        ...

    async def probe_reachability(self, host: str, timeout_s: float) -> PingResult:
        """Probe *host* once, bounded by *timeout_s*. May raise."""
        ...


# ---------------------------------------------------------------------------
# Output parsers (pure, easily testable)
# ---------------------------------------------------------------------------


def parse_iwconfig(output: str) -> LinkReading:
    """Convert ``iwconfig`` output into a LinkReading.

    The first interface block with a quoted ESSID is taken as the active
    link. ``ESSID:off/any`` (or no wireless block at all) means disconnected.

    Args:
        output: Combined stdout of ``iwconfig``.

    Returns:
        A CONNECTED reading with SSID and optional signal, or DISCONNECTED.
    """
    # Interface blocks start at column 0; continuation lines are indented.
    for block in _BLOCK_SPLIT_RE.split(output):
        essid = _ESSID_RE.search(block)
        if essid is None:
            continue
        signal_match = _SIGNAL_RE.search(block)
        return LinkReading(
            state=LinkState.CONNECTED,
            ssid=essid.group(1) or UNKNOWN_SSID,
            signal=int(signal_match.group(1)) if signal_match else None,
        )
    return LinkReading(state=LinkState.DISCONNECTED)


def parse_ping(returncode: int, output: str) -> PingResult:
    """Convert a single-echo ``ping`` run into a PingResult.

    A non-zero exit code means no reply arrived: the host is not alive.

    Args:
        returncode: Exit status of ``ping``.
        output: Its stdout.
    """
    if returncode != 0:
        return PingResult(alive=False)
    match = _PING_TIME_RE.search(output)
    if match is None:
        logger.warning("ping succeeded but reported no round-trip time")
        return PingResult(alive=True)
    return PingResult(alive=True, latency_ms=float(match.group(1)))


# ---------------------------------------------------------------------------
# Subprocess-backed probe
# ---------------------------------------------------------------------------


async def _run(*args: str) -> tuple[int, str]:
    """Run a command and return ``(returncode, stdout)``.

    The child process is killed and reaped if the awaiting task is cancelled
    (which is how ``asyncio.wait_for`` enforces probe timeouts).

    Raises:
        ProbeError: If the executable cannot be started.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError as exc:
        raise ProbeError(f"cannot run {args[0]}: {exc}") from exc

    try:
        stdout, _ = await proc.communicate()
    finally:
        if proc.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
    return proc.returncode, stdout.decode("utf-8", errors="replace")


class SystemProbe:
    """Probe backed by the ``iwconfig`` and ``ping`` command line tools.

    Args:
        interface: Wireless interface name, e.g. ``wlan0``. ``None`` asks
            ``iwconfig`` for every interface.
    """

    def __init__(self, interface: str | None = None) -> None:
        self._interface = interface

    async def read_link_state(self) -> LinkReading:
        """Read the link state from ``iwconfig``.

        Raises:
            ProbeError: If ``iwconfig`` is missing or exits non-zero.
        """
        args = ["iwconfig"]
        if self._interface:
            args.append(self._interface)
        returncode, output = await _run(*args)
        if returncode != 0:
            raise ProbeError(f"iwconfig exited with status {returncode}")
        return parse_iwconfig(output)

    async def probe_reachability(self, host: str, timeout_s: float) -> PingResult:
        """Send one echo request to *host* and wait at most *timeout_s*.

        Raises:
            ProbeError: If ``ping`` cannot be run.
        """
        wait_s = max(1, math.ceil(timeout_s))
        returncode, output = await _run("ping", "-n", "-c", "1", "-W", str(wait_s), host)
        return parse_ping(returncode, output)
