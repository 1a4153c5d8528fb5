"""In-process cache tier for beatcache.

- ExpiringMap: key/value map with idle-time eviction by a self-stopping sweep
- BeatmapMemoryCache: beatmaps by ID, by hash and by beatmapset ID
- BeatmapInvalidator: ordered removal of superseded beatmaps from every tier
"""

from beatcache.cache.expiring_map import ExpiringMap
from beatcache.cache.invalidation import BeatmapInvalidator
from beatcache.cache.memory import BeatmapMemoryCache

__all__ = [
    "ExpiringMap",
    "BeatmapMemoryCache",
    "BeatmapInvalidator",
]
