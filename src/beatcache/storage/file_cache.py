"""Content-addressed cache of beatmap files.

Serves ``.osu`` content from durable storage, falling back to the origin.
When the caller knows the beatmap's current MD5 hash, a stored file with a
different hash is treated as stale: it is deleted and re-downloaded, never
returned.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from beatcache.core.result import FailureReason, Ok
from beatcache.storage.base import FileStorage

if TYPE_CHECKING:
    from beatcache.origin.client import OsuApiClient

logger = logging.getLogger(__name__)


class FileCache:
    """Storage-first, origin-fallback access to beatmap files."""

    def __init__(self, storage: FileStorage, origin: OsuApiClient) -> None:
        self.storage = storage
        self.origin = origin

    async def get_content(self, beatmap_id: int, expected_hash: str | None = None) -> bytes | None:
        """Get the file of a beatmap.

        Args:
            beatmap_id: The beatmap ID
            expected_hash: MD5 the stored file must match to be served

        Returns:
            The file content, or None if neither storage nor origin has it.
        """
        stored = await self.storage.read(beatmap_id)

        if isinstance(stored, Ok):
            content = stored.value
            if expected_hash is None or FileStorage.compute_hash(content) == expected_hash:
                return content

            logger.info(f"Stored file of beatmap {beatmap_id} does not match {expected_hash}")
            await self.invalidate(beatmap_id)
        elif stored.reason is not FailureReason.NOT_FOUND:
            logger.warning(f"Falling back to origin for beatmap file {beatmap_id}: {stored.detail}")

        downloaded = await self.origin.get_beatmap_file(beatmap_id)
        if not isinstance(downloaded, Ok):
            return None

        content = downloaded.value
        if expected_hash is not None and FileStorage.compute_hash(content) != expected_hash:
            # The origin is authoritative; the caller's hash is out of date
            logger.warning(f"Origin file of beatmap {beatmap_id} does not match {expected_hash}")

        # A failed write only means the next request downloads again
        await self.storage.write(beatmap_id, content)
        return content

    async def invalidate(self, beatmap_id: int) -> None:
        """Delete the stored file of a beatmap. Failures are logged, not raised."""
        result = await self.storage.delete(beatmap_id)
        if not isinstance(result, Ok):
            logger.warning(f"Could not delete file of beatmap {beatmap_id}: {result.detail}")
