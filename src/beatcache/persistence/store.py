"""Persistent store tier.

Wraps :class:`BeatmapRepository` in a transaction per call and converts
every database error or rejected update into a ``Failure``; nothing raised by
SQLAlchemy or the repository crosses this boundary. Every operation is safe to retry.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from beatcache.core.model import Beatmap
from beatcache.core.result import Failure, Ok, Result
from beatcache.persistence.db import session_context
from beatcache.persistence.repositories import BeatmapRepository

logger = logging.getLogger(__name__)


class BeatmapStore:
    """Result-returning access to persisted beatmaps."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def get_by_id(self, beatmap_id: int) -> Result[Beatmap]:
        try:
            async with session_context(self.session_factory) as session:
                beatmap = await BeatmapRepository(session).get_by_id(beatmap_id)
        except SQLAlchemyError as e:
            logger.error(f"Error when getting beatmap {beatmap_id} from database: {e}")
            return Failure.persistence(str(e))

        if beatmap is None:
            return Failure.not_found(f"beatmap {beatmap_id}")
        return Ok(beatmap)

    async def get_by_hash(self, file_md5: str) -> Result[Beatmap]:
        try:
            async with session_context(self.session_factory) as session:
                beatmap = await BeatmapRepository(session).get_by_hash(file_md5)
        except SQLAlchemyError as e:
            logger.error(f"Error when getting beatmap {file_md5} from database: {e}")
            return Failure.persistence(str(e))

        if beatmap is None:
            return Failure.not_found(f"beatmap {file_md5}")
        return Ok(beatmap)

    async def get(self, id_or_hash: int | str) -> Result[Beatmap]:
        """Look up by ID or by hash depending on the identifier type."""
        if isinstance(id_or_hash, int):
            return await self.get_by_id(id_or_hash)
        return await self.get_by_hash(id_or_hash)

    async def insert(self, *beatmaps: Beatmap) -> Result[int]:
        """Insert beatmaps atomically: either every row commits or none does.

        Inserting nothing issues no statement.
        """
        if not beatmaps:
            return Ok(0)

        try:
            async with session_context(self.session_factory) as session:
                count = await BeatmapRepository(session).insert_many(list(beatmaps))
        except IntegrityError as e:
            # Typically a concurrent resolve that inserted the same beatmap first
            ids = ", ".join(str(b.beatmap_id) for b in beatmaps)
            logger.warning(f"Beatmap insert rejected for {ids}: {e.orig}")
            return Failure.persistence(str(e.orig))
        except SQLAlchemyError as e:
            logger.error(f"Error when inserting beatmaps: {e}")
            return Failure.persistence(str(e))

        return Ok(count)

    async def update_partial(self, beatmap_id: int, **fields: Any) -> Result[bool]:
        """Update mutable fields (approved, last_checked, max_combo) in place."""
        try:
            async with session_context(self.session_factory) as session:
                updated = await BeatmapRepository(session).update_partial(beatmap_id, fields)
        except SQLAlchemyError as e:
            logger.error(f"Error when updating beatmap {beatmap_id}: {e}")
            return Failure.persistence(str(e))
        except ValueError as e:
            logger.error(f"Rejected update of beatmap {beatmap_id}: {e}")
            return Failure.persistence(str(e))

        return Ok(updated)

    async def fill_max_combo(self, beatmap_id: int, max_combo: int) -> Result[bool]:
        try:
            async with session_context(self.session_factory) as session:
                updated = await BeatmapRepository(session).fill_max_combo(beatmap_id, max_combo)
        except SQLAlchemyError as e:
            logger.error(f"Error when updating maximum combo of beatmap {beatmap_id}: {e}")
            return Failure.persistence(str(e))

        return Ok(updated)

    async def delete(self, beatmap_id: int) -> Result[bool]:
        try:
            async with session_context(self.session_factory) as session:
                deleted = await BeatmapRepository(session).delete(beatmap_id)
        except SQLAlchemyError as e:
            logger.error(f"Error when deleting beatmap {beatmap_id}: {e}")
            return Failure.persistence(str(e))

        return Ok(deleted)
