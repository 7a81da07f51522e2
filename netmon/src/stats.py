"""
Pure statistics over a sequence of connectivity samples.

No side effects, no I/O, no clock. Every function accepts any ordered
sequence of samples (normally ``Store.window()``) and returns ``None`` for an
empty sequence instead of dividing by zero.

Outage policy: any sample that is not REACHABLE counts as down. This covers
NOT_REACHABLE, PROBE_ERROR and UNKNOWN (link read failure) alike.

CHANGELOG:
- 2026-10-17: Initial creation (STORY-007)

TODO:
- None
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from netmon.src.models import Reachability, Sample, Summary


def _mean(values: Iterable[float | int | None]) -> float | None:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return sum(present) / len(present)


def _round(value: float | None) -> float | None:
    return None if value is None else round(value, 2)


def uptime_percent(samples: Sequence[Sample]) -> float | None:
    """Percentage of samples whose reference host was reachable.

    Returns:
        A value in [0, 100], or None for an empty sequence.
    """
    if not samples:
        return None
    reachable = sum(1 for s in samples if s.reachability is Reachability.REACHABLE)
    return 100.0 * reachable / len(samples)


def longest_outage_streak(samples: Sequence[Sample]) -> int | None:
    """Length of the longest run of consecutive non-reachable samples.

    Returns:
        The run length in samples, 0 if every sample is reachable, or None
        for an empty sequence.
    """
    if not samples:
        return None
    longest = 0
    current = 0
    for sample in samples:
        if sample.reachability is Reachability.REACHABLE:
            current = 0
        else:
            current += 1
            longest = max(longest, current)
    return longest


def average_signal(samples: Sequence[Sample]) -> float | None:
    """Mean signal strength over samples that report one."""
    return _mean(s.signal_strength for s in samples)


def average_ping(samples: Sequence[Sample]) -> float | None:
    """Mean round-trip time over samples that report one."""
    return _mean(s.round_trip_time_ms for s in samples)


def summarize(samples: Sequence[Sample], interval_s: float) -> Summary:
    """Bundle every metric into a Summary.

    Args:
        samples: Ordered samples, oldest-first.
        interval_s: Sampling interval used to turn the outage streak into
            a duration.
    """
    streak = longest_outage_streak(samples)
    return Summary(
        sample_count=len(samples),
        uptime_percent=_round(uptime_percent(samples)),
        longest_outage_samples=streak,
        longest_outage_s=None if streak is None else streak * interval_s,
        average_signal=_round(average_signal(samples)),
        average_ping_ms=_round(average_ping(samples)),
    )
