"""Beatmap cache service: the composition root of the resolution pipeline.

Owns the memory tier, the store, the origin client and the file cache, and
exposes the operations the HTTP layer and the population job use.

Example:
    service = BeatmapCacheService.create()
    beatmap = await service.resolve_beatmap(75)
    content = await service.get_beatmap_file(75)
    await service.shutdown()
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from beatcache.cache.invalidation import BeatmapInvalidator
from beatcache.cache.memory import BeatmapMemoryCache
from beatcache.config import Settings, settings
from beatcache.core.errors import BeatmapDecodeError
from beatcache.core.model import Beatmap
from beatcache.core.osu_file import compute_max_combo
from beatcache.core.result import Ok
from beatcache.observability.logging import configure_logging
from beatcache.origin.client import OsuApiClient
from beatcache.persistence.db import get_session_factory
from beatcache.persistence.store import BeatmapStore
from beatcache.services.beatmapsets import BeatmapsetResolver
from beatcache.services.resolver import BeatmapResolver
from beatcache.storage.base import FileStorage
from beatcache.storage.file_cache import FileCache
from beatcache.storage.local import LocalFileStorage

logger = logging.getLogger(__name__)


class BeatmapCacheService:
    """Resolves beatmaps, beatmapsets and beatmap files through every tier."""

    def __init__(
        self,
        memory: BeatmapMemoryCache,
        store: BeatmapStore,
        origin: OsuApiClient,
        storage: FileStorage,
        recheck_threshold: float = settings.recheck_threshold,
        serve_stale_on_recheck_failure: bool = settings.serve_stale_on_recheck_failure,
    ) -> None:
        self.memory = memory
        self.store = store
        self.origin = origin
        self.files = FileCache(storage, origin)
        self.invalidator = BeatmapInvalidator(memory, self.files, store)
        self.resolver = BeatmapResolver(
            memory,
            store,
            origin,
            self.invalidator,
            recheck_threshold=recheck_threshold,
            serve_stale_on_recheck_failure=serve_stale_on_recheck_failure,
        )
        self.beatmapsets = BeatmapsetResolver(self.resolver)

    @classmethod
    def create(
        cls,
        config: Settings = settings,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        origin: OsuApiClient | None = None,
        storage: FileStorage | None = None,
    ) -> BeatmapCacheService:
        """Build a service from settings, overriding any collaborator given.

        Also configures the root logger from the settings.
        """
        configure_logging(json_format=config.log_json, level=config.log_level)
        return cls(
            memory=BeatmapMemoryCache(config.cache_lifetime, config.cache_sweep_interval),
            store=BeatmapStore(session_factory or get_session_factory()),
            origin=origin
            or OsuApiClient(
                api_key=config.osu_api_key,
                api_url=config.osu_api_url,
                file_url=config.osu_file_url,
                timeout=config.origin_timeout,
            ),
            storage=storage or LocalFileStorage(config.beatmap_file_path),
            recheck_threshold=config.recheck_threshold,
            serve_stale_on_recheck_failure=config.serve_stale_on_recheck_failure,
        )

    async def resolve_beatmap(self, id_or_hash: int | str) -> Beatmap | None:
        """Get a beatmap by beatmap ID or MD5 hash."""
        return await self.resolver.resolve(id_or_hash)

    async def resolve_beatmapset(self, beatmapset_id: int) -> list[Beatmap] | None:
        """Get the osu!standard beatmaps of a beatmapset."""
        return await self.beatmapsets.resolve(beatmapset_id)

    async def get_beatmap_file(
        self, beatmap_id: int, expected_hash: str | None = None
    ) -> bytes | None:
        """Get the .osu file of a beatmap, backfilling its maximum combo if unknown."""
        content = await self.files.get_content(beatmap_id, expected_hash)
        if content is None:
            return None

        beatmap = await self.resolver.get_from_store(beatmap_id)
        if beatmap is not None and beatmap.max_combo is None:
            await self._backfill_from_file(beatmap, content)

        return content

    async def get_beatmap_file_by_hash(self, file_md5: str) -> bytes | None:
        """Get the .osu file of the beatmap currently identified by ``file_md5``."""
        beatmap = await self.resolve_beatmap(file_md5)
        if beatmap is None:
            return None
        return await self.get_beatmap_file(beatmap.beatmap_id, beatmap.file_md5)

    async def backfill_max_combo(self, beatmap_id: int, max_combo: int) -> bool:
        """Set the maximum combo of a beatmap if it is still unknown."""
        return await self.resolver.update_max_combo(beatmap_id, max_combo)

    async def insert_beatmaps(self, *beatmaps: Beatmap) -> bool:
        """Insert beatmaps into the store in one transaction.

        Inserting nothing is a no-op. A failing batch is rolled back as a whole
        and logged.
        """
        if not beatmaps:
            return True
        return isinstance(await self.store.insert(*beatmaps), Ok)

    async def shutdown(self) -> None:
        """Stop background sweeps and close the origin client."""
        await self.memory.shutdown()
        await self.origin.close()

    async def _backfill_from_file(self, beatmap: Beatmap, content: bytes) -> None:
        # A file from another revision would yield another revision's combo
        if FileStorage.compute_hash(content) != beatmap.file_md5:
            return

        try:
            max_combo = compute_max_combo(content)
        except BeatmapDecodeError as e:
            logger.warning(f"Could not compute maximum combo of beatmap {beatmap.beatmap_id}: {e}")
            return

        await self.backfill_max_combo(beatmap.beatmap_id, max_combo)
