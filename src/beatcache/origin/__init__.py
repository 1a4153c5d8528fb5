"""Origin tier: the osu! API."""

from beatcache.origin.client import OsuApiClient

__all__ = ["OsuApiClient"]
