"""Tests for the storage-first beatmap file cache."""

from unittest.mock import AsyncMock

import pytest

from beatcache.core.result import Failure, Ok
from beatcache.storage.base import FileStorage
from beatcache.storage.file_cache import FileCache
from beatcache.storage.local import LocalFileStorage

OLD_CONTENT = b"osu file format v14\n\n[Metadata]\nVersion:Old\n"
NEW_CONTENT = b"osu file format v14\n\n[Metadata]\nVersion:New\n"


class TestFileCache:
    """Test FileCache lookups and verification."""

    @pytest.fixture
    def files(self, file_storage: LocalFileStorage, origin: AsyncMock) -> FileCache:
        return FileCache(file_storage, origin)

    @pytest.mark.asyncio
    async def test_serves_stored_file(
        self, files: FileCache, file_storage: LocalFileStorage, origin: AsyncMock
    ) -> None:
        await file_storage.write(75, OLD_CONTENT)

        assert await files.get_content(75) == OLD_CONTENT
        origin.get_beatmap_file.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_serves_stored_file_matching_hash(
        self, files: FileCache, file_storage: LocalFileStorage, origin: AsyncMock
    ) -> None:
        await file_storage.write(75, OLD_CONTENT)

        content = await files.get_content(75, FileStorage.compute_hash(OLD_CONTENT))
        assert content == OLD_CONTENT
        origin.get_beatmap_file.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_downloads_and_stores_missing_file(
        self, files: FileCache, file_storage: LocalFileStorage, origin: AsyncMock
    ) -> None:
        origin.get_beatmap_file.return_value = Ok(NEW_CONTENT)

        assert await files.get_content(75) == NEW_CONTENT
        assert await file_storage.read(75) == Ok(NEW_CONTENT)

    @pytest.mark.asyncio
    async def test_stale_file_is_replaced(
        self, files: FileCache, file_storage: LocalFileStorage, origin: AsyncMock
    ) -> None:
        """A stored file with the wrong hash is never returned."""
        await file_storage.write(75, OLD_CONTENT)
        origin.get_beatmap_file.return_value = Ok(NEW_CONTENT)

        content = await files.get_content(75, FileStorage.compute_hash(NEW_CONTENT))

        assert content == NEW_CONTENT
        origin.get_beatmap_file.assert_awaited_once_with(75)
        assert await file_storage.read(75) == Ok(NEW_CONTENT)

    @pytest.mark.asyncio
    async def test_stale_file_deleted_when_origin_has_nothing(
        self, files: FileCache, file_storage: LocalFileStorage, origin: AsyncMock
    ) -> None:
        await file_storage.write(75, OLD_CONTENT)

        assert await files.get_content(75, FileStorage.compute_hash(NEW_CONTENT)) is None
        assert not file_storage.path_for(75).exists()

    @pytest.mark.asyncio
    async def test_origin_content_served_despite_hash_mismatch(
        self, files: FileCache, file_storage: LocalFileStorage, origin: AsyncMock
    ) -> None:
        """The origin is authoritative over the caller's hash."""
        origin.get_beatmap_file.return_value = Ok(NEW_CONTENT)

        content = await files.get_content(75, FileStorage.compute_hash(OLD_CONTENT))

        assert content == NEW_CONTENT
        assert await file_storage.read(75) == Ok(NEW_CONTENT)

    @pytest.mark.asyncio
    async def test_origin_unavailable(self, files: FileCache, origin: AsyncMock) -> None:
        origin.get_beatmap_file.return_value = Failure.unavailable("timeout")
        assert await files.get_content(75) is None

    @pytest.mark.asyncio
    async def test_storage_failure_falls_back_to_origin(self, origin: AsyncMock) -> None:
        storage = AsyncMock(spec=FileStorage)
        storage.read.return_value = Failure.persistence("disk error")
        storage.write.return_value = Failure.persistence("disk error")
        origin.get_beatmap_file.return_value = Ok(NEW_CONTENT)

        content = await FileCache(storage, origin).get_content(75)

        assert content == NEW_CONTENT
        storage.write.assert_awaited_once_with(75, NEW_CONTENT)

    @pytest.mark.asyncio
    async def test_invalidate_logs_failures(self, origin: AsyncMock) -> None:
        storage = AsyncMock(spec=FileStorage)
        storage.delete.return_value = Failure.persistence("read-only filesystem")

        await FileCache(storage, origin).invalidate(75)

        storage.delete.assert_awaited_once_with(75)
