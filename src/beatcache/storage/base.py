"""Base beatmap file storage interface.

Defines the abstract interface for durable ``.osu`` file storage backends.
Backends report outcomes as :mod:`beatcache.core.result` values and never
raise for I/O failures.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod

from beatcache.core.result import Result


class FileStorage(ABC):
    """Abstract base class for beatmap file storage backends."""

    @abstractmethod
    async def read(self, beatmap_id: int) -> Result[bytes]:
        """Read the stored file of a beatmap.

        Returns:
            ``Ok(content)``, ``Failure.not_found()`` if no file is stored, or
            ``Failure.persistence()`` if reading failed.
        """
        ...

    @abstractmethod
    async def write(self, beatmap_id: int, content: bytes) -> Result[None]:
        """Store the file of a beatmap, replacing any existing one."""
        ...

    @abstractmethod
    async def delete(self, beatmap_id: int) -> Result[bool]:
        """Delete the file of a beatmap.

        Deleting a missing file is not an error.

        Returns:
            ``Ok(True)`` if deleted, ``Ok(False)`` if there was nothing to delete.
        """
        ...

    @staticmethod
    def compute_hash(content: bytes) -> str:
        """Compute the MD5 hash osu! uses to identify beatmap files."""
        return hashlib.md5(content, usedforsecurity=False).hexdigest()
