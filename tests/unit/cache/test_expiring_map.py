"""Tests for the time-expiring map."""

import asyncio

import pytest

from beatcache.cache.expiring_map import ExpiringMap
from beatcache.core.errors import ConfigurationError


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


async def wait_until(condition, timeout: float = 1.0) -> None:
    """Poll until the background sweep has caught up."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not condition():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.005)


class TestExpiringMapConstruction:
    """Test construction parameters."""

    @pytest.mark.parametrize("lifetime", [0, -1])
    def test_rejects_non_positive_lifetime(self, lifetime: float) -> None:
        with pytest.raises(ConfigurationError):
            ExpiringMap(lifetime)

    def test_rejects_non_positive_sweep_interval(self) -> None:
        with pytest.raises(ConfigurationError):
            ExpiringMap(10, sweep_interval=0)

    def test_configuration_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            ExpiringMap(-5)

    def test_sweep_interval_capped_by_lifetime(self) -> None:
        """The sweep never runs less often than entries expire."""
        assert ExpiringMap(60, sweep_interval=300).sweep_interval == 60


class TestExpiringMapEntries:
    """Test entry lifetime without a running event loop."""

    @pytest.fixture
    def clock(self) -> FakeClock:
        return FakeClock()

    @pytest.fixture
    def entries(self, clock: FakeClock) -> ExpiringMap[str, int]:
        return ExpiringMap(10, clock=clock)

    def test_set_and_get(self, entries: ExpiringMap[str, int]) -> None:
        entries.set("a", 1)
        assert entries.get("a") == 1
        assert "a" in entries
        assert len(entries) == 1

    def test_missing_key(self, entries: ExpiringMap[str, int]) -> None:
        assert entries.get("missing") is None
        assert not entries.has("missing")

    def test_entry_present_until_lifetime(
        self, entries: ExpiringMap[str, int], clock: FakeClock
    ) -> None:
        entries.set("a", 1)
        clock.advance(10)
        assert entries.get("a") == 1

    def test_entry_absent_after_lifetime(
        self, entries: ExpiringMap[str, int], clock: FakeClock
    ) -> None:
        """Expired entries are gone on read even before a sweep runs."""
        entries.set("a", 1)
        clock.advance(10.5)
        assert entries.get("a") is None
        assert len(entries) == 0

    def test_set_resets_idle_timer(
        self, entries: ExpiringMap[str, int], clock: FakeClock
    ) -> None:
        entries.set("a", 1)
        clock.advance(8)
        entries.set("a", 2)
        clock.advance(8)
        assert entries.get("a") == 2

    def test_get_does_not_reset_idle_timer(
        self, entries: ExpiringMap[str, int], clock: FakeClock
    ) -> None:
        """Only writes keep an entry alive."""
        entries.set("a", 1)
        clock.advance(8)
        assert entries.get("a") == 1
        clock.advance(8)
        assert entries.get("a") is None

    def test_delete(self, entries: ExpiringMap[str, int]) -> None:
        entries.set("a", 1)
        assert entries.delete("a") is True
        assert entries.delete("a") is False
        assert entries.get("a") is None

    def test_sweep_removes_only_expired(
        self, entries: ExpiringMap[str, int], clock: FakeClock
    ) -> None:
        entries.set("old", 1)
        clock.advance(6)
        entries.set("new", 2)
        clock.advance(6)

        assert entries.sweep() == 1
        assert list(entries) == ["new"]

    def test_clear(self, entries: ExpiringMap[str, int]) -> None:
        entries.set("a", 1)
        entries.set("b", 2)
        entries.clear()
        assert len(entries) == 0

    def test_no_sweep_task_without_event_loop(self, entries: ExpiringMap[str, int]) -> None:
        entries.set("a", 1)
        assert not entries.sweeping


class TestExpiringMapSweep:
    """Test the background sweep task."""

    @pytest.mark.asyncio
    async def test_sweep_starts_on_first_set(self) -> None:
        entries: ExpiringMap[str, int] = ExpiringMap(10)
        assert not entries.sweeping

        entries.set("a", 1)
        assert entries.sweeping

        await entries.shutdown()
        assert not entries.sweeping

    @pytest.mark.asyncio
    async def test_sweep_expires_entries_and_stops_when_empty(self) -> None:
        """An emptied map holds no running sweep task."""
        clock = FakeClock()
        entries: ExpiringMap[str, int] = ExpiringMap(10, sweep_interval=0.01, clock=clock)
        entries.set("a", 1)
        clock.advance(11)

        await wait_until(lambda: not entries.sweeping)
        assert len(entries) == 0

        await entries.shutdown()

    @pytest.mark.asyncio
    async def test_sweep_restarts_after_stopping(self) -> None:
        clock = FakeClock()
        entries: ExpiringMap[str, int] = ExpiringMap(10, sweep_interval=0.01, clock=clock)
        entries.set("a", 1)
        clock.advance(11)
        await wait_until(lambda: not entries.sweeping)

        entries.set("b", 2)
        assert entries.sweeping
        assert entries.get("b") == 2

        await entries.shutdown()

    @pytest.mark.asyncio
    async def test_sweep_keeps_fresh_entries(self) -> None:
        clock = FakeClock()
        entries: ExpiringMap[str, int] = ExpiringMap(10, sweep_interval=0.01, clock=clock)
        entries.set("a", 1)

        await asyncio.sleep(0.05)
        assert entries.get("a") == 1
        assert entries.sweeping

        await entries.shutdown()

    @pytest.mark.asyncio
    async def test_shutdown_keeps_entries(self) -> None:
        entries: ExpiringMap[str, int] = ExpiringMap(10)
        entries.set("a", 1)
        await entries.shutdown()
        await entries.shutdown()
        assert entries.get("a") == 1
