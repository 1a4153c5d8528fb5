"""beatcache: tiered caching of osu! beatmaps and beatmap files.

Resolves beatmaps through an in-process expiring cache, a SQL store and the
osu! API, keeping all three consistent when a beatmap is revised upstream.
"""

from beatcache.core.model import Beatmap, RankedStatus
from beatcache.services.facade import BeatmapCacheService

__version__ = "0.1.0"

__all__ = [
    "Beatmap",
    "RankedStatus",
    "BeatmapCacheService",
    "__version__",
]
