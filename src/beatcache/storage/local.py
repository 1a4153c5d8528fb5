"""Local filesystem beatmap file storage.

Stores files flat as ``{base_path}/{beatmap_id}.osu``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import cast

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]

from beatcache.core.result import Failure, Ok, Result
from beatcache.storage.base import FileStorage

logger = logging.getLogger(__name__)


class LocalFileStorage(FileStorage):
    """Local filesystem storage backend."""

    def __init__(self, base_path: str | Path = "/data/osudroid/beatmaps"):
        """Initialize local file storage.

        Args:
            base_path: Directory holding the beatmap files
        """
        self.base_path = Path(base_path)

    def path_for(self, beatmap_id: int) -> Path:
        return self.base_path / f"{beatmap_id}.osu"

    async def _ensure_directory(self) -> None:
        if not await aiofiles.os.path.exists(self.base_path):
            await aiofiles.os.makedirs(self.base_path, exist_ok=True)

    async def read(self, beatmap_id: int) -> Result[bytes]:
        path = self.path_for(beatmap_id)
        try:
            async with aiofiles.open(path, "rb") as f:
                content = await f.read()
        except FileNotFoundError:
            return Failure.not_found(str(path))
        except OSError as e:
            logger.error(f"Failed to read beatmap file {path}: {e}")
            return Failure.persistence(str(e))

        return Ok(cast(bytes, content))

    async def write(self, beatmap_id: int, content: bytes) -> Result[None]:
        path = self.path_for(beatmap_id)
        try:
            await self._ensure_directory()
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error(f"Failed to write beatmap file {path}: {e}")
            return Failure.persistence(str(e))

        logger.debug(f"Stored beatmap file {path} ({len(content)} bytes)")
        return Ok(None)

    async def delete(self, beatmap_id: int) -> Result[bool]:
        path = self.path_for(beatmap_id)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return Ok(False)
        except OSError as e:
            logger.warning(f"Failed to delete beatmap file {path}: {e}")
            return Failure.persistence(str(e))

        logger.debug(f"Deleted beatmap file {path}")
        return Ok(True)
