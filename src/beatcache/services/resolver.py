"""Three-tier beatmap resolution.

Lookup order is memory, then store, then origin. A beatmap fetched from the
origin is inserted into the store; every resolved beatmap is written into
both memory maps under its current hash.

Unranked beatmaps change without their ID changing, so before a beatmap is
returned its status is re-validated against the origin if it is unstable and
was last checked more than ``recheck_threshold`` seconds ago:

- origin has nothing to say (unreachable or missing): existing data is left
  untouched and the call returns None, or the unrefreshed beatmap when
  ``serve_stale_on_recheck_failure`` is enabled
- origin hash differs: the old beatmap is invalidated and the new one inserted
- origin hash matches: ``last_checked`` and ``approved`` are updated in place
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from beatcache.cache.invalidation import BeatmapInvalidator
from beatcache.cache.memory import BeatmapMemoryCache
from beatcache.core.converter import OsuApiBeatmap, beatmap_from_api_response
from beatcache.core.model import Beatmap, utcnow
from beatcache.core.result import Ok, value_or_none
from beatcache.origin.client import OsuApiClient
from beatcache.persistence.store import BeatmapStore

logger = logging.getLogger(__name__)

DEFAULT_RECHECK_THRESHOLD = 900.0


@dataclass
class RecheckOutcome:
    """Result of re-validating a beatmap against the origin."""

    beatmap: Beatmap
    # False when the refreshed state could not be persisted
    persisted: bool = True


class BeatmapResolver:
    """Resolves single beatmaps by ID or MD5 hash."""

    def __init__(
        self,
        memory: BeatmapMemoryCache,
        store: BeatmapStore,
        origin: OsuApiClient,
        invalidator: BeatmapInvalidator,
        recheck_threshold: float = DEFAULT_RECHECK_THRESHOLD,
        serve_stale_on_recheck_failure: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.memory = memory
        self.store = store
        self.origin = origin
        self.invalidator = invalidator
        self.recheck_threshold = recheck_threshold
        self.serve_stale_on_recheck_failure = serve_stale_on_recheck_failure
        self._clock = clock

    async def resolve(self, id_or_hash: int | str) -> Beatmap | None:
        """Resolve a beatmap by beatmap ID (int) or MD5 hash (str).

        Returns:
            The beatmap, or None if it cannot be found or its recheck failed.

        Raises:
            InvalidationError: if a superseded beatmap could not be removed.
        """
        beatmap = self.memory.get(id_or_hash)

        if beatmap is None:
            beatmap = value_or_none(await self.store.get(id_or_hash))

        if beatmap is None:
            beatmap = await self._fetch(id_or_hash)
            if beatmap is None:
                return None

        cache_in_memory = True
        if beatmap.needs_recheck(self.recheck_threshold, self._clock()):
            outcome = await self._recheck(beatmap)
            if outcome is None:
                return None
            beatmap = outcome.beatmap
            # An unpersisted refresh stays out of memory so the next call rechecks
            cache_in_memory = outcome.persisted

        if cache_in_memory:
            self.memory.put(beatmap)
        return beatmap

    async def get_from_store(self, id_or_hash: int | str) -> Beatmap | None:
        """Look up a beatmap in memory or the store only, without origin traffic."""
        beatmap = self.memory.get(id_or_hash)
        if beatmap is None:
            beatmap = value_or_none(await self.store.get(id_or_hash))
        return beatmap

    async def invalidate_if_diverged(self, beatmap: Beatmap) -> bool:
        """Invalidate the known beatmap with this ID if its hash differs.

        Checks the memory tier first, then the store. Returns whether an
        invalidation happened.
        """
        current = self.memory.by_id.get(beatmap.beatmap_id)
        if current is None:
            current = value_or_none(await self.store.get_by_id(beatmap.beatmap_id))

        if current is None or current.file_md5 == beatmap.file_md5:
            return False

        logger.info(
            f"Beatmap {beatmap.beatmap_id} changed from {current.file_md5} to {beatmap.file_md5}"
        )
        await self.invalidator.invalidate(current.file_md5, beatmap.beatmap_id)
        return True

    async def update_max_combo(self, beatmap_id: int, max_combo: int) -> bool:
        """Fill in the maximum combo of a beatmap whose origin data lacks it."""
        cached = self.memory.by_id.get(beatmap_id)
        if cached is not None:
            cached.fill_max_combo(max_combo)

        return isinstance(await self.store.fill_max_combo(beatmap_id, max_combo), Ok)

    async def _fetch(self, id_or_hash: int | str) -> Beatmap | None:
        fetched = await self.origin.get_beatmap(id_or_hash)
        if not isinstance(fetched, Ok):
            logger.debug(f"Beatmap {id_or_hash} not available from origin: {fetched.reason.value}")
            return None

        beatmap = self._convert(fetched.value)
        if beatmap is None:
            return None

        # A hash lookup can surface a new revision of a beatmap already known by ID
        if isinstance(id_or_hash, str):
            await self.invalidate_if_diverged(beatmap)

        # A rejected insert (e.g. a concurrent resolve won) is logged by the store
        await self.store.insert(beatmap)
        return beatmap

    async def _recheck(self, beatmap: Beatmap) -> RecheckOutcome | None:
        fetched = await self.origin.get_beatmap(beatmap.beatmap_id)
        latest = self._convert(fetched.value) if isinstance(fetched, Ok) else None

        if latest is None:
            logger.warning(f"Could not recheck beatmap {beatmap.beatmap_id}, keeping cached data")
            if self.serve_stale_on_recheck_failure:
                return RecheckOutcome(beatmap)
            return None

        if latest.file_md5 != beatmap.file_md5:
            await self.invalidator.invalidate(beatmap.file_md5, beatmap.beatmap_id)
            await self.store.insert(latest)
            return RecheckOutcome(latest)

        refreshed = beatmap.model_copy()
        refreshed.mark_checked(latest.approved, self._clock())

        updated = await self.store.update_partial(
            beatmap.beatmap_id,
            last_checked=refreshed.last_checked,
            approved=int(refreshed.approved),
        )
        if not isinstance(updated, Ok):
            return RecheckOutcome(refreshed, persisted=False)

        # Keep the memory-tier instance in step with the store
        beatmap.mark_checked(refreshed.approved, refreshed.last_checked)
        return RecheckOutcome(beatmap)

    def _convert(self, response: OsuApiBeatmap) -> Beatmap | None:
        try:
            beatmap = beatmap_from_api_response(response)
        except (KeyError, ValueError) as e:
            logger.warning(f"Malformed beatmap from osu! API: {e}")
            return None
        # Fetched just now, as far as staleness checks are concerned
        beatmap.last_checked = self._clock()
        return beatmap
