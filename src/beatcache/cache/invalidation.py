"""Cross-tier invalidation of superseded beatmaps.

When the origin reports a new hash for a known beatmap ID, every trace of the
old beatmap is removed in this order:

1. the memory tier (old hash, beatmap ID and any cached set listing the ID)
2. the stored .osu file
3. the store row

Memory and file go first so that no reader finds a store row whose file or
memory entry has already vanished, and no reader re-caches the old beatmap
after its row is gone. A file that cannot be deleted is logged and ignored
(it fails hash verification on the next read); a store row that cannot be
deleted raises :class:`InvalidationError` so the replacement is not inserted.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from beatcache.core.errors import InvalidationError
from beatcache.core.result import Ok

if TYPE_CHECKING:
    from beatcache.cache.memory import BeatmapMemoryCache
    from beatcache.persistence.store import BeatmapStore
    from beatcache.storage.file_cache import FileCache

logger = logging.getLogger(__name__)


class BeatmapInvalidator:
    """Removes a superseded beatmap from every tier."""

    def __init__(
        self,
        memory: BeatmapMemoryCache,
        files: FileCache,
        store: BeatmapStore,
    ) -> None:
        self.memory = memory
        self.files = files
        self.store = store

    async def invalidate(self, old_hash: str, beatmap_id: int) -> None:
        """Invalidate the beatmap ``beatmap_id`` previously cached as ``old_hash``.

        Raises:
            InvalidationError: if the store row could not be deleted.
        """
        self.memory.evict(beatmap_id, old_hash)

        await self.files.invalidate(beatmap_id)

        result = await self.store.delete(beatmap_id)
        if not isinstance(result, Ok):
            raise InvalidationError(beatmap_id, result.detail)

        logger.info(f"Invalidated beatmap {beatmap_id} (old hash {old_hash})")
