"""Beatmapset resolution.

A beatmapset is cached as a whole in the memory tier. On a miss the set is
fetched from the origin, every osu!standard beatmap in it is checked against
the known revision of that beatmap ID, and superseded revisions are
invalidated before the new ones are cached. Set membership is taken as
authoritative at fetch time, so no staleness recheck happens at this level.
"""

from __future__ import annotations

import logging

from beatcache.core.converter import beatmap_from_api_response, is_supported
from beatcache.core.model import Beatmap
from beatcache.core.result import Ok
from beatcache.services.resolver import BeatmapResolver

logger = logging.getLogger(__name__)


class BeatmapsetResolver:
    """Resolves every beatmap of a beatmapset."""

    def __init__(self, resolver: BeatmapResolver) -> None:
        self.resolver = resolver
        self.memory = resolver.memory
        self.store = resolver.store
        self.origin = resolver.origin

    async def resolve(self, beatmapset_id: int) -> list[Beatmap] | None:
        """Resolve a beatmapset.

        Returns:
            The set's osu!standard beatmaps in origin order, or None if the
            origin has none.

        Raises:
            InvalidationError: if a superseded beatmap could not be removed.
        """
        cached = self.memory.get_set(beatmapset_id)
        if cached is not None:
            return cached

        fetched = await self.origin.get_beatmapset(beatmapset_id)
        if not isinstance(fetched, Ok):
            logger.debug(
                f"Beatmapset {beatmapset_id} not available from origin: {fetched.reason.value}"
            )
            return None

        beatmaps: list[Beatmap] = []
        for entry in fetched.value:
            if not is_supported(entry):
                continue
            try:
                beatmaps.append(beatmap_from_api_response(entry))
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping malformed beatmap in set {beatmapset_id}: {e}")

        if not beatmaps:
            return None

        replaced: list[Beatmap] = []
        for beatmap in beatmaps:
            if await self.resolver.invalidate_if_diverged(beatmap):
                replaced.append(beatmap)
            self.memory.put(beatmap)

        # Reinsert what was invalidated so the store keeps a row for every known ID
        if replaced:
            await self.store.insert(*replaced)

        self.memory.put_set(beatmapset_id, beatmaps)
        return beatmaps
