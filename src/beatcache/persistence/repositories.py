"""Repository pattern for beatmap persistence.

Session-scoped query helpers. These raise SQLAlchemy errors as-is; the
:class:`beatcache.persistence.store.BeatmapStore` wraps them into results.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from beatcache.core.model import Beatmap
from beatcache.persistence.tables import MUTABLE_COLUMNS, BeatmapTable


class BeatmapRepository:
    """Repository for beatmap rows."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, beatmap_id: int) -> Beatmap | None:
        stmt = select(BeatmapTable).where(BeatmapTable.beatmap_id == beatmap_id)
        result = await self.session.execute(stmt)
        row = result.scalar_one_or_none()
        return row.to_model() if row is not None else None

    async def get_by_hash(self, file_md5: str) -> Beatmap | None:
        stmt = select(BeatmapTable).where(BeatmapTable.file_md5 == file_md5).limit(1)
        result = await self.session.execute(stmt)
        row = result.scalar_one_or_none()
        return row.to_model() if row is not None else None

    async def insert_many(self, beatmaps: list[Beatmap]) -> int:
        """Insert beatmaps in one statement. Returns the number of rows."""
        if not beatmaps:
            return 0
        await self.session.execute(
            insert(BeatmapTable), [beatmap.model_dump() for beatmap in beatmaps]
        )
        return len(beatmaps)

    async def update_partial(self, beatmap_id: int, fields: dict[str, Any]) -> bool:
        """Update mutable columns of a beatmap. Returns whether a row matched."""
        unknown = set(fields) - MUTABLE_COLUMNS
        if unknown:
            raise ValueError(f"Columns cannot be partially updated: {sorted(unknown)}")

        stmt = (
            update(BeatmapTable).where(BeatmapTable.beatmap_id == beatmap_id).values(**fields)
        )
        result = await self.session.execute(stmt)
        return bool(result.rowcount)

    async def fill_max_combo(self, beatmap_id: int, max_combo: int) -> bool:
        """Set max_combo only where it is still null."""
        stmt = (
            update(BeatmapTable)
            .where(BeatmapTable.beatmap_id == beatmap_id)
            .where(BeatmapTable.max_combo.is_(None))
            .values(max_combo=max_combo)
        )
        result = await self.session.execute(stmt)
        return bool(result.rowcount)

    async def delete(self, beatmap_id: int) -> bool:
        """Delete a beatmap. Returns whether a row was deleted."""
        stmt = delete(BeatmapTable).where(BeatmapTable.beatmap_id == beatmap_id)
        result = await self.session.execute(stmt)
        return bool(result.rowcount)
