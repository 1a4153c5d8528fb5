"""Time-expiring in-process map.

Every entry remembers when it was last set. A background asyncio task sweeps
the map on a fixed period and removes entries idle longer than the lifetime.
The task starts on the first ``set`` and exits on its own once the map is
empty, so an idle map holds no running task.

Reading an entry does not keep it alive; only setting it again does.

Example:
    beatmaps = ExpiringMap[int, Beatmap](lifetime=900)
    beatmaps.set(75, beatmap)
    beatmaps.get(75)
    await beatmaps.shutdown()
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterator
from typing import Generic, TypeVar

from beatcache.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")

DEFAULT_SWEEP_INTERVAL = 300.0


class ExpiringMap(Generic[K, V]):
    """Key/value map that evicts entries not set for ``lifetime`` seconds."""

    def __init__(
        self,
        lifetime: float,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        name: str = "expiring-map",
    ) -> None:
        if lifetime <= 0:
            raise ConfigurationError(f"Invalid cache lifetime: {lifetime}")
        if sweep_interval <= 0:
            raise ConfigurationError(f"Invalid sweep interval: {sweep_interval}")

        self.lifetime = lifetime
        # The sweep must run more often than entries expire
        self.sweep_interval = min(sweep_interval, lifetime)
        self.name = name
        self._clock = clock
        self._values: dict[K, V] = {}
        self._touched: dict[K, float] = {}
        self._task: asyncio.Task[None] | None = None

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, key: object) -> bool:
        return self.has(key)  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._values))

    @property
    def sweeping(self) -> bool:
        """Whether the background sweep task is currently running."""
        return self._task is not None and not self._task.done()

    def _expired(self, key: K, now: float) -> bool:
        return now - self._touched[key] > self.lifetime

    def set(self, key: K, value: V) -> None:
        """Insert or overwrite an entry and reset its idle timer."""
        self._values[key] = value
        self._touched[key] = self._clock()
        self._arm()

    def get(self, key: K) -> V | None:
        """Look up an entry without resetting its idle timer."""
        if key not in self._values:
            return None
        if self._expired(key, self._clock()):
            self.delete(key)
            return None
        return self._values[key]

    def has(self, key: K) -> bool:
        return self.get(key) is not None

    def delete(self, key: K) -> bool:
        """Remove an entry immediately. Returns whether it was present."""
        self._touched.pop(key, None)
        return self._values.pop(key, None) is not None

    def clear(self) -> None:
        self._values.clear()
        self._touched.clear()

    def sweep(self) -> int:
        """Remove every expired entry. Returns the number removed."""
        now = self._clock()
        expired = [key for key in self._touched if self._expired(key, now)]
        for key in expired:
            self.delete(key)
        if expired:
            logger.debug(f"Swept {len(expired)} expired entries from {self.name}")
        return len(expired)

    def _arm(self) -> None:
        if self.sweeping:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop: expired entries are still dropped lazily on read
            return
        self._task = loop.create_task(self._sweep_loop(), name=f"{self.name}-sweep")

    async def _sweep_loop(self) -> None:
        while self._values:
            await asyncio.sleep(self.sweep_interval)
            self.sweep()
        logger.debug(f"{self.name} is empty, sweep stopped")

    async def shutdown(self) -> None:
        """Stop the sweep task. Entries are kept."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
