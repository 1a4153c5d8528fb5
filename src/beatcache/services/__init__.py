"""Beatmap resolution services."""

from beatcache.services.beatmapsets import BeatmapsetResolver
from beatcache.services.facade import BeatmapCacheService
from beatcache.services.resolver import BeatmapResolver

__all__ = [
    "BeatmapResolver",
    "BeatmapsetResolver",
    "BeatmapCacheService",
]
