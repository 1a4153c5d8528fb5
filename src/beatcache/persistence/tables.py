"""SQLAlchemy ORM model for beatmap persistence.

One row per beatmap ID. ``file_md5`` and ``beatmapset_id`` are indexed for
hash lookups and beatmapset queries.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from beatcache.core.model import Beatmap


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class BeatmapTable(Base):
    """Beatmap table."""

    __tablename__ = "beatmap"

    beatmap_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    beatmapset_id: Mapped[int] = mapped_column(Integer, nullable=False)
    file_md5: Mapped[str] = mapped_column(String(32), nullable=False)

    approved: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    last_checked: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    max_combo: Mapped[int | None] = mapped_column(Integer, nullable=True)

    submit_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    approved_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    last_update: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    artist: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    version: Mapped[str] = mapped_column(Text, nullable=False)
    source: Mapped[str] = mapped_column(Text, nullable=False)
    tags: Mapped[str] = mapped_column(Text, nullable=False)
    creator: Mapped[str] = mapped_column(Text, nullable=False)
    creator_id: Mapped[int] = mapped_column(Integer, nullable=False)

    bpm: Mapped[float] = mapped_column(Float, nullable=False)
    difficultyrating: Mapped[float | None] = mapped_column(Float)
    diff_aim: Mapped[float | None] = mapped_column(Float)
    diff_speed: Mapped[float | None] = mapped_column(Float)
    diff_size: Mapped[float] = mapped_column(Float, nullable=False)
    diff_overall: Mapped[float] = mapped_column(Float, nullable=False)
    diff_approach: Mapped[float] = mapped_column(Float, nullable=False)
    diff_drain: Mapped[float] = mapped_column(Float, nullable=False)
    hit_length: Mapped[int] = mapped_column(Integer, nullable=False)
    total_length: Mapped[int] = mapped_column(Integer, nullable=False)

    genre_id: Mapped[int] = mapped_column(Integer, nullable=False)
    language_id: Mapped[int] = mapped_column(Integer, nullable=False)
    favourite_count: Mapped[int] = mapped_column(Integer, nullable=False)
    rating: Mapped[float] = mapped_column(Float, nullable=False)
    playcount: Mapped[int] = mapped_column(Integer, nullable=False)
    passcount: Mapped[int] = mapped_column(Integer, nullable=False)

    count_normal: Mapped[int] = mapped_column(Integer, nullable=False)
    count_slider: Mapped[int] = mapped_column(Integer, nullable=False)
    count_spinner: Mapped[int] = mapped_column(Integer, nullable=False)

    storyboard: Mapped[bool] = mapped_column(Boolean, nullable=False)
    video: Mapped[bool] = mapped_column(Boolean, nullable=False)
    download_unavailable: Mapped[bool] = mapped_column(Boolean, nullable=False)
    audio_unavailable: Mapped[bool] = mapped_column(Boolean, nullable=False)
    packs: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (
        Index("beatmapset_id_idx", beatmapset_id),
        Index("beatmap_md5_idx", file_md5),
    )

    def to_model(self) -> Beatmap:
        return Beatmap.model_validate(
            {column.key: getattr(self, column.key) for column in self.__table__.columns}
        )


# Columns a partial update may touch; everything else is replaced only by reinsert
MUTABLE_COLUMNS = frozenset({"approved", "last_checked", "max_combo"})
