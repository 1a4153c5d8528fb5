"""Fixtures wiring the resolution pipeline over real memory, store and file tiers."""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from beatcache.cache.invalidation import BeatmapInvalidator
from beatcache.cache.memory import BeatmapMemoryCache
from beatcache.core.model import utcnow
from beatcache.persistence.store import BeatmapStore
from beatcache.services.resolver import BeatmapResolver
from beatcache.storage.file_cache import FileCache
from beatcache.storage.local import LocalFileStorage


class Clock:
    """Wall clock that can be moved forward."""

    def __init__(self) -> None:
        self.now = utcnow()

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def files(file_storage: LocalFileStorage, origin: AsyncMock) -> FileCache:
    return FileCache(file_storage, origin)


@pytest.fixture
def invalidator(
    memory: BeatmapMemoryCache, files: FileCache, store: BeatmapStore
) -> BeatmapInvalidator:
    return BeatmapInvalidator(memory, files, store)


@pytest.fixture
def resolver(
    memory: BeatmapMemoryCache,
    store: BeatmapStore,
    origin: AsyncMock,
    invalidator: BeatmapInvalidator,
    clock: Clock,
) -> BeatmapResolver:
    return BeatmapResolver(memory, store, origin, invalidator, recheck_threshold=900, clock=clock)
