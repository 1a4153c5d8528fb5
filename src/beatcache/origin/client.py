"""osu! API client (origin tier).

Talks to osu! API v1 ``get_beatmaps`` for metadata and downloads ``.osu``
files from the website. Transport errors and non-2xx responses are reported
as ``UNAVAILABLE``; a well-formed response without a matching beatmap is
``NOT_FOUND``. Nothing raised by httpx crosses this boundary.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
import orjson

from beatcache.config import settings
from beatcache.core.converter import OsuApiBeatmap, is_supported
from beatcache.core.result import Failure, Ok, Result

logger = logging.getLogger(__name__)


class OsuApiClient:
    """Async osu! API v1 client returning explicit results."""

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        file_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.osu_api_key
        self.api_url = (api_url or settings.osu_api_url).rstrip("/")
        self.file_url = (file_url or settings.osu_file_url).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.origin_timeout
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_beatmaps(self, params: dict[str, str]) -> Result[list[OsuApiBeatmap]]:
        query = {"k": self.api_key, **params}
        try:
            response = await self._client.get(f"{self.api_url}/get_beatmaps", params=query)
        except httpx.HTTPError as e:
            logger.warning(f"osu! API request failed: {e}")
            return Failure.unavailable(str(e))

        if response.status_code != 200:
            logger.warning(f"osu! API returned status {response.status_code} for {params}")
            return Failure.unavailable(f"status {response.status_code}")

        try:
            data: Any = orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            logger.warning(f"osu! API returned malformed JSON: {e}")
            return Failure.unavailable(str(e))

        if not isinstance(data, list):
            return Failure.unavailable("unexpected response shape")
        return Ok(data)

    async def get_beatmap(self, id_or_hash: int | str) -> Result[OsuApiBeatmap]:
        """Fetch one osu!standard beatmap by beatmap ID or MD5 hash."""
        key = "b" if isinstance(id_or_hash, int) else "h"
        result = await self._get_beatmaps({key: str(id_or_hash)})
        if not isinstance(result, Ok):
            return result

        for entry in result.value:
            if is_supported(entry):
                return Ok(entry)
        return Failure.not_found(f"beatmap {id_or_hash}")

    async def get_beatmapset(self, beatmapset_id: int) -> Result[list[OsuApiBeatmap]]:
        """Fetch every beatmap of a beatmapset, in origin order."""
        result = await self._get_beatmaps({"s": str(beatmapset_id)})
        if isinstance(result, Ok) and not result.value:
            return Failure.not_found(f"beatmapset {beatmapset_id}")
        return result

    async def get_beatmap_file(self, beatmap_id: int) -> Result[bytes]:
        """Download the .osu file of a beatmap."""
        try:
            response = await self._client.get(f"{self.file_url}/{beatmap_id}")
        except httpx.HTTPError as e:
            logger.warning(f"Beatmap file download failed for {beatmap_id}: {e}")
            return Failure.unavailable(str(e))

        if response.status_code == 404 or (response.is_success and not response.content):
            return Failure.not_found(f"beatmap file {beatmap_id}")
        if not response.is_success:
            logger.warning(
                f"Beatmap file download for {beatmap_id} returned status {response.status_code}"
            )
            return Failure.unavailable(f"status {response.status_code}")

        return Ok(response.content)
