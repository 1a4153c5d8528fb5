"""Exceptions raised by beatcache.

I/O tiers (store, file storage, origin) never raise across their boundary;
they return a :class:`beatcache.core.result.Result` instead. The exceptions
here cover the cases that must reach the caller.
"""

from __future__ import annotations


class BeatcacheError(Exception):
    """Base class for all beatcache errors."""


class ConfigurationError(BeatcacheError, ValueError):
    """Invalid construction parameters (e.g. a non-positive cache lifetime)."""


class InvalidationError(BeatcacheError):
    """A superseded beatmap could not be removed from the store.

    The replacement beatmap must not be inserted while this is unresolved.
    """

    def __init__(self, beatmap_id: int, detail: str = "") -> None:
        self.beatmap_id = beatmap_id
        self.detail = detail
        message = f"Failed to invalidate beatmap {beatmap_id}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class BeatmapDecodeError(BeatcacheError, ValueError):
    """A .osu file could not be decoded."""
