"""Global pytest configuration and fixtures.

Provides a SQLite-backed store, local file storage in a temporary directory,
a mocked osu! API client and factories for osu! API beatmap entries.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from beatcache.cache.memory import BeatmapMemoryCache
from beatcache.core.converter import OsuApiBeatmap
from beatcache.core.result import Failure
from beatcache.origin.client import OsuApiClient
from beatcache.persistence.db import create_engine, create_session_factory, init_db
from beatcache.persistence.store import BeatmapStore
from beatcache.storage.local import LocalFileStorage

ApiBeatmapFactory = Callable[..., OsuApiBeatmap]


def make_api_beatmap(**overrides: Any) -> OsuApiBeatmap:
    """Build an osu! API v1 ``get_beatmaps`` entry."""
    entry: OsuApiBeatmap = {
        "approved": "1",
        "submit_date": "2007-10-06 17:46:31",
        "approved_date": "2007-10-06 17:46:31",
        "last_update": "2007-10-06 17:10:36",
        "artist": "Kenji Ninuma",
        "beatmap_id": "75",
        "beatmapset_id": "1",
        "bpm": "119.999",
        "creator": "peppy",
        "creator_id": "2",
        "difficultyrating": "2.4",
        "diff_aim": "1.2",
        "diff_speed": "1.1",
        "diff_size": "4",
        "diff_overall": "6",
        "diff_approach": "6",
        "diff_drain": "6",
        "hit_length": "108",
        "source": "",
        "genre_id": "2",
        "language_id": "3",
        "title": "DISCO PRINCE",
        "total_length": "142",
        "version": "Normal",
        "file_md5": "a5b99395a42bd55bc5eb1d2411cbdf8b",
        "mode": "0",
        "tags": "katamari",
        "favourite_count": "1000",
        "rating": "9.1",
        "playcount": "500000",
        "passcount": "200000",
        "count_normal": "160",
        "count_slider": "30",
        "count_spinner": "3",
        "max_combo": "314",
        "storyboard": "0",
        "video": "0",
        "download_unavailable": "0",
        "audio_unavailable": "0",
        "packs": "S1",
    }
    entry.update({key: (None if value is None else str(value)) for key, value in overrides.items()})
    return entry


@pytest.fixture
def api_beatmap() -> ApiBeatmapFactory:
    """Factory for osu! API beatmap entries."""
    return make_api_beatmap


@pytest_asyncio.fixture
async def session_factory(tmp_path: Path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Session factory over a fresh SQLite database."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'beatcache.db'}")
    await init_db(engine)
    yield create_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def store(session_factory: async_sessionmaker[AsyncSession]) -> BeatmapStore:
    return BeatmapStore(session_factory)


@pytest.fixture
def file_storage(tmp_path: Path) -> LocalFileStorage:
    return LocalFileStorage(tmp_path / "beatmaps")


@pytest.fixture
def origin() -> AsyncMock:
    """osu! API client double that finds nothing unless configured."""
    client = AsyncMock(spec=OsuApiClient)
    client.get_beatmap.return_value = Failure.not_found()
    client.get_beatmapset.return_value = Failure.not_found()
    client.get_beatmap_file.return_value = Failure.not_found()
    return client


@pytest_asyncio.fixture
async def memory() -> AsyncIterator[BeatmapMemoryCache]:
    cache = BeatmapMemoryCache()
    yield cache
    await cache.shutdown()
