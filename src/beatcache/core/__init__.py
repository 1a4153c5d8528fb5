"""Core beatmap types: domain model, API conversion, results and errors."""

from beatcache.core.converter import (
    OsuApiBeatmap,
    beatmap_from_api_response,
    beatmap_to_api_response,
    is_supported,
)
from beatcache.core.errors import (
    BeatcacheError,
    BeatmapDecodeError,
    ConfigurationError,
    InvalidationError,
)
from beatcache.core.model import Beatmap, RankedStatus
from beatcache.core.result import Failure, FailureReason, Ok, Result

__all__ = [
    "Beatmap",
    "RankedStatus",
    "OsuApiBeatmap",
    "beatmap_from_api_response",
    "beatmap_to_api_response",
    "is_supported",
    "Ok",
    "Failure",
    "FailureReason",
    "Result",
    "BeatcacheError",
    "BeatmapDecodeError",
    "ConfigurationError",
    "InvalidationError",
]
