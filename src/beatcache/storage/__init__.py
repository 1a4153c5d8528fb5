"""Durable storage for beatmap files.

- FileStorage: abstract backend returning explicit results
- LocalFileStorage: ``{base_path}/{beatmap_id}.osu`` on the local filesystem
- FileCache: storage-first, origin-fallback access with MD5 verification
"""

from beatcache.storage.base import FileStorage
from beatcache.storage.file_cache import FileCache
from beatcache.storage.local import LocalFileStorage

__all__ = [
    "FileStorage",
    "LocalFileStorage",
    "FileCache",
]
