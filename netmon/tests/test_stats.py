"""
Unit tests for the pure statistics functions.

CHANGELOG:
- 2026-10-17: Initial creation (STORY-007)

TODO:
- None
"""

from __future__ import annotations

from collections.abc import Callable

import pytest
from netmon.src.models import LinkState, Reachability, Sample
from netmon.src.stats import (
    average_ping,
    average_signal,
    longest_outage_streak,
    summarize,
    uptime_percent,
)

R = Reachability.REACHABLE
NR = Reachability.NOT_REACHABLE
PE = Reachability.PROBE_ERROR
UNK = Reachability.UNKNOWN


def _series(
    make_sample: Callable[..., Sample], states: list[Reachability]
) -> list[Sample]:
    return [make_sample(i, state) for i, state in enumerate(states)]


class TestEmptySequence:
    """Every metric is None for an empty sequence."""

    def test_all_metrics_none(self) -> None:
        assert uptime_percent([]) is None
        assert longest_outage_streak([]) is None
        assert average_signal([]) is None
        assert average_ping([]) is None

    def test_summary_of_nothing(self) -> None:
        summary = summarize([], interval_s=5.0)

        assert summary.sample_count == 0
        assert summary.uptime_percent is None
        assert summary.longest_outage_samples is None
        assert summary.longest_outage_s is None
        assert summary.average_signal is None
        assert summary.average_ping_ms is None


class TestUptimePercent:
    """Share of reachable samples, in percent."""

    def test_half_reachable(self, make_sample: Callable[..., Sample]) -> None:
        assert uptime_percent(_series(make_sample, [R, NR, R, PE])) == 50.0

    @pytest.mark.parametrize(
        "states",
        [[R], [NR], [UNK, UNK], [R, R, NR], [PE, R, UNK, NR, R, R, R]],
    )
    def test_within_bounds(
        self, make_sample: Callable[..., Sample], states: list[Reachability]
    ) -> None:
        value = uptime_percent(_series(make_sample, states))
        assert value is not None
        assert 0.0 <= value <= 100.0


class TestLongestOutageStreak:
    """Longest run of consecutive non-reachable samples."""

    def test_run_between_reachable(self, make_sample: Callable[..., Sample]) -> None:
        assert longest_outage_streak(_series(make_sample, [R, NR, NR, R])) == 2

    def test_unknown_and_probe_error_count_as_down(
        self, make_sample: Callable[..., Sample]
    ) -> None:
        assert longest_outage_streak(_series(make_sample, [R, UNK, PE, NR, R, NR])) == 3

    def test_trailing_run(self, make_sample: Callable[..., Sample]) -> None:
        assert longest_outage_streak(_series(make_sample, [NR, R, NR, NR, NR])) == 3

    def test_always_up(self, make_sample: Callable[..., Sample]) -> None:
        assert longest_outage_streak(_series(make_sample, [R, R, R])) == 0

    def test_disconnected_link_counts_as_down(
        self, make_sample: Callable[..., Sample]
    ) -> None:
        samples = [
            make_sample(0),
            make_sample(1, NR, link_state=LinkState.DISCONNECTED),
            make_sample(2),
        ]
        assert longest_outage_streak(samples) == 1


class TestAverages:
    """Averages ignore samples without a value."""

    def test_average_signal_skips_missing(
        self, make_sample: Callable[..., Sample]
    ) -> None:
        samples = [
            make_sample(0, signal=-40),
            make_sample(1, signal=None),
            make_sample(2, signal=-60),
        ]
        assert average_signal(samples) == -50.0

    def test_average_signal_none_without_link(
        self, make_sample: Callable[..., Sample]
    ) -> None:
        assert average_signal(_series(make_sample, [UNK, UNK])) is None

    def test_average_ping_only_reachable(
        self, make_sample: Callable[..., Sample]
    ) -> None:
        samples = [
            make_sample(0, rtt_ms=10.0),
            make_sample(1, NR),
            make_sample(2, rtt_ms=30.0),
        ]
        assert average_ping(samples) == 20.0

    def test_average_ping_none_when_never_reachable(
        self, make_sample: Callable[..., Sample]
    ) -> None:
        assert average_ping(_series(make_sample, [NR, PE])) is None


class TestSummarize:
    """summarize() bundles and rounds the metrics."""

    def test_bundles_metrics(self, make_sample: Callable[..., Sample]) -> None:
        samples = [
            make_sample(0, signal=-41, rtt_ms=10.004),
            make_sample(1, NR, signal=-50),
            make_sample(2, PE, signal=-50),
        ]

        summary = summarize(samples, interval_s=5.0)

        assert summary.sample_count == 3
        assert summary.uptime_percent == 33.33
        assert summary.longest_outage_samples == 2
        assert summary.longest_outage_s == 10.0
        assert summary.average_signal == -47.0
        assert summary.average_ping_ms == 10.0
