"""Beatmap domain model.

A beatmap is identified by its stable ``beatmap_id`` and by ``file_md5``, the
MD5 hash of its ``.osu`` file, which changes whenever the mapper revises the
beatmap. Everything except ``approved``, ``last_checked`` and ``max_combo`` is
fixed at creation and only ever replaced by a full invalidate-and-reinsert.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import IntEnum

from pydantic import BaseModel, Field


class RankedStatus(IntEnum):
    """osu! ranking status of a beatmap."""

    GRAVEYARD = -2
    WIP = -1
    PENDING = 0
    RANKED = 1
    APPROVED = 2
    QUALIFIED = 3
    LOVED = 4

    @property
    def is_stable(self) -> bool:
        """Ranked and approved beatmaps are final and never re-checked."""
        return self in (RankedStatus.RANKED, RankedStatus.APPROVED)


def utcnow() -> datetime:
    return datetime.now(UTC)


class Beatmap(BaseModel):
    """A cached beatmap."""

    model_config = {
        "extra": "forbid",
        "validate_default": True,
    }

    beatmap_id: int
    beatmapset_id: int
    file_md5: str = Field(min_length=32, max_length=32)

    # Mutable fields
    approved: RankedStatus
    last_checked: datetime = Field(default_factory=utcnow)
    max_combo: int | None = None

    submit_date: datetime
    approved_date: datetime | None = None
    last_update: datetime

    artist: str
    title: str
    version: str
    source: str = ""
    tags: str = ""
    creator: str
    creator_id: int

    bpm: float
    difficultyrating: float | None = None
    diff_aim: float | None = None
    diff_speed: float | None = None
    diff_size: float
    diff_overall: float
    diff_approach: float
    diff_drain: float
    hit_length: int
    total_length: int

    genre_id: int = 0
    language_id: int = 0
    favourite_count: int = 0
    rating: float = 0.0
    playcount: int = 0
    passcount: int = 0

    count_normal: int
    count_slider: int
    count_spinner: int

    storyboard: bool = False
    video: bool = False
    download_unavailable: bool = False
    audio_unavailable: bool = False
    packs: str | None = None

    @property
    def is_stable(self) -> bool:
        return RankedStatus(self.approved).is_stable

    def needs_recheck(self, threshold_seconds: float, now: datetime | None = None) -> bool:
        """Whether this beatmap is unstable and was last checked too long ago."""
        if self.is_stable:
            return False
        now = now or utcnow()
        last_checked = self.last_checked
        if last_checked.tzinfo is None:
            last_checked = last_checked.replace(tzinfo=UTC)
        return (now - last_checked).total_seconds() > threshold_seconds

    def mark_checked(self, approved: RankedStatus, now: datetime | None = None) -> None:
        """Record a successful recheck; ``last_checked`` never moves backwards."""
        now = now or utcnow()
        last_checked = self.last_checked
        if last_checked.tzinfo is None:
            last_checked = last_checked.replace(tzinfo=UTC)
        if now > last_checked:
            self.last_checked = now
        self.approved = approved

    def fill_max_combo(self, max_combo: int) -> bool:
        """Set ``max_combo`` if it is still unknown. Returns whether it changed."""
        if self.max_combo is not None:
            return False
        self.max_combo = max_combo
        return True
