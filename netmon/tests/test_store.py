"""
Unit tests for the dual-tier Store.

Tests verify:
- append() writes both the window and the durable log.
- FIFO eviction keeps the window at exactly its capacity.
- window() returns a snapshot copy.
- A failed durable write keeps the window entry and is not fatal.
- replay() restores the window after a restart.
- replay() on an unreadable log leaves the window empty.

CHANGELOG:
- 2026-10-17: Initial creation (STORY-006)

TODO:
- None
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from netmon.src.models import Sample
from netmon.src.sample_log import SampleLog
from netmon.src.store import Store


def _make_log_mock() -> AsyncMock:
    log = AsyncMock()
    log.append = AsyncMock()
    log.tail = AsyncMock(return_value=[])
    log.all = AsyncMock(return_value=[])
    return log


class TestAppend:
    """append() feeds both tiers."""

    @pytest.mark.asyncio
    async def test_append_writes_window_and_log(
        self, make_sample: Callable[..., Sample]
    ) -> None:
        log = _make_log_mock()
        store = Store(log, capacity=3)
        sample = make_sample(0)

        assert await store.append(sample) is True

        log.append.assert_awaited_once_with(sample)
        assert store.window() == [sample]
        assert store.latest() == sample

    @pytest.mark.asyncio
    async def test_fifo_eviction_keeps_capacity(
        self, make_sample: Callable[..., Sample]
    ) -> None:
        store = Store(_make_log_mock(), capacity=3)
        samples = [make_sample(i) for i in range(5)]

        for sample in samples:
            await store.append(sample)

        assert len(store.window()) == 3
        assert store.window() == samples[2:]
        assert store.latest() == samples[-1]

    @pytest.mark.asyncio
    async def test_window_is_a_snapshot(
        self, make_sample: Callable[..., Sample]
    ) -> None:
        store = Store(_make_log_mock(), capacity=3)
        await store.append(make_sample(0))

        snapshot = store.window()
        await store.append(make_sample(1))

        assert len(snapshot) == 1
        assert len(store.window()) == 2

    def test_empty_store(self) -> None:
        store = Store(_make_log_mock())

        assert store.window() == []
        assert store.latest() is None
        assert store.capacity == 100

    def test_rejects_zero_capacity(self) -> None:
        with pytest.raises(ValueError):
            Store(_make_log_mock(), capacity=0)


class TestDurableWriteFailure:
    """A failing durable tier never drops the in-memory sample."""

    @pytest.mark.asyncio
    async def test_failed_write_keeps_window_entry(
        self,
        make_sample: Callable[..., Sample],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        log = _make_log_mock()
        log.append = AsyncMock(side_effect=RuntimeError("disk full"))
        store = Store(log, capacity=3)
        sample = make_sample(0)

        with caplog.at_level(logging.ERROR, logger="netmon.src.store"):
            result = await store.append(sample)

        assert result is False
        assert store.window() == [sample]
        assert "Durable log write failed" in caplog.text

    @pytest.mark.asyncio
    async def test_later_appends_still_attempted(
        self, make_sample: Callable[..., Sample]
    ) -> None:
        log = _make_log_mock()
        log.append = AsyncMock(side_effect=[RuntimeError("locked"), None])
        store = Store(log, capacity=3)

        assert await store.append(make_sample(0)) is False
        assert await store.append(make_sample(1)) is True
        assert log.append.await_count == 2


class TestReplay:
    """The window is restored from the durable log at startup."""

    @pytest.mark.asyncio
    async def test_restart_reproduces_window(
        self, tmp_path: Path, make_sample: Callable[..., Sample]
    ) -> None:
        db_path = tmp_path / "network_logs.db"
        a, b, c = make_sample(0), make_sample(1), make_sample(2)

        async with SampleLog(db_path) as log:
            store = Store(log, capacity=10)
            for sample in (a, b, c):
                await store.append(sample)
            before = store.window()

        async with SampleLog(db_path) as log:
            restarted = Store(log, capacity=10)
            assert await restarted.load_recent(3) == [a, b, c]
            loaded = await restarted.replay()

            assert loaded == 3
            assert restarted.window() == before

    @pytest.mark.asyncio
    async def test_replay_defaults_to_capacity(
        self, make_sample: Callable[..., Sample]
    ) -> None:
        log = _make_log_mock()
        log.tail = AsyncMock(return_value=[make_sample(0)])
        store = Store(log, capacity=7)

        await store.replay()

        log.tail.assert_awaited_once_with(7)

    @pytest.mark.asyncio
    async def test_unreadable_log_leaves_window_empty(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        log = _make_log_mock()
        log.tail = AsyncMock(side_effect=RuntimeError("database disk image is malformed"))
        store = Store(log, capacity=5)

        with caplog.at_level(logging.ERROR, logger="netmon.src.store"):
            loaded = await store.replay()

        assert loaded == 0
        assert store.window() == []
        assert "empty window" in caplog.text

    @pytest.mark.asyncio
    async def test_export_all_reads_durable_log(
        self, make_sample: Callable[..., Sample]
    ) -> None:
        history = [make_sample(i) for i in range(3)]
        log = _make_log_mock()
        log.all = AsyncMock(return_value=history)
        store = Store(log, capacity=1)

        assert await store.export_all() == history
