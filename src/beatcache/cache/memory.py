"""In-process beatmap cache tier.

Holds three expiring maps:
- beatmap ID -> Beatmap
- MD5 hash -> Beatmap
- beatmapset ID -> beatmaps of the set, in origin order

Evicting a beatmap also drops every cached set that lists it, so a set
entry never outlives a superseded revision of one of its members.

The instance is constructed by the composition root and stopped with
``shutdown()``; nothing here is module-level state.
"""

from __future__ import annotations

import logging

from beatcache.cache.expiring_map import DEFAULT_SWEEP_INTERVAL, ExpiringMap
from beatcache.core.model import Beatmap

logger = logging.getLogger(__name__)

DEFAULT_LIFETIME = 900.0


class BeatmapMemoryCache:
    """Memory tier keyed by beatmap ID, by hash and by beatmapset ID."""

    def __init__(
        self,
        lifetime: float = DEFAULT_LIFETIME,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
    ) -> None:
        self.by_id: ExpiringMap[int, Beatmap] = ExpiringMap(
            lifetime, sweep_interval, name="beatmap-id-cache"
        )
        self.by_hash: ExpiringMap[str, Beatmap] = ExpiringMap(
            lifetime, sweep_interval, name="beatmap-hash-cache"
        )
        self.by_set: ExpiringMap[int, list[Beatmap]] = ExpiringMap(
            lifetime, sweep_interval, name="beatmapset-cache"
        )

    def get(self, id_or_hash: int | str) -> Beatmap | None:
        """Look up a beatmap in the key space matching the identifier type."""
        if isinstance(id_or_hash, int):
            return self.by_id.get(id_or_hash)
        return self.by_hash.get(id_or_hash)

    def put(self, beatmap: Beatmap) -> None:
        """Cache a beatmap under its ID and its current hash."""
        self.by_id.set(beatmap.beatmap_id, beatmap)
        self.by_hash.set(beatmap.file_md5, beatmap)

    def evict(self, beatmap_id: int, file_md5: str) -> None:
        """Remove a beatmap and any cached beatmapset containing it."""
        self.by_id.delete(beatmap_id)
        self.by_hash.delete(file_md5)
        for beatmapset_id in self.by_set:
            members = self.by_set.get(beatmapset_id)
            if members and any(b.beatmap_id == beatmap_id for b in members):
                self.by_set.delete(beatmapset_id)
        logger.debug(f"Evicted beatmap {beatmap_id} ({file_md5}) from memory")

    def get_set(self, beatmapset_id: int) -> list[Beatmap] | None:
        return self.by_set.get(beatmapset_id)

    def put_set(self, beatmapset_id: int, beatmaps: list[Beatmap]) -> None:
        self.by_set.set(beatmapset_id, beatmaps)

    async def shutdown(self) -> None:
        """Stop all sweep tasks."""
        await self.by_id.shutdown()
        await self.by_hash.shutdown()
        await self.by_set.shutdown()
