"""Tests for settings loading."""

import pytest

from beatcache.config import Settings


class TestSettings:
    """Test environment-driven configuration."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("BEATMAP_FILE_PATH", raising=False)
        monkeypatch.delenv("BEATCACHE_CACHE_LIFETIME", raising=False)

        config = Settings(_env_file=None)

        assert config.cache_lifetime == 900
        assert config.cache_sweep_interval == 300
        assert config.recheck_threshold == 900
        assert config.serve_stale_on_recheck_failure is False
        assert config.beatmap_file_path == "/data/osudroid/beatmaps"
        assert config.osu_api_url == "https://osu.ppy.sh/api"

    def test_prefixed_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BEATCACHE_CACHE_LIFETIME", "60")
        monkeypatch.setenv("BEATCACHE_SERVE_STALE_ON_RECHECK_FAILURE", "true")

        config = Settings(_env_file=None)

        assert config.cache_lifetime == 60
        assert config.serve_stale_on_recheck_failure is True

    def test_shared_environment_names(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Deployment-wide variables are read without the prefix."""
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///beatmaps.db")
        monkeypatch.setenv("OSU_API_KEY", "secret")
        monkeypatch.setenv("BEATMAP_FILE_PATH", "/srv/beatmaps")

        config = Settings(_env_file=None)

        assert config.database_url == "sqlite+aiosqlite:///beatmaps.db"
        assert config.osu_api_key == "secret"
        assert config.beatmap_file_path == "/srv/beatmaps"
