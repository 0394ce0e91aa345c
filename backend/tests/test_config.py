"""Tests for tractionboard.config Settings."""

import pytest

from tractionboard.config import Settings


class TestSettingsDefaults:
    """Default settings load without errors when no env vars set."""

    def test_default_settings_load(self):
        """Settings instantiates successfully with no env vars."""
        settings = Settings()
        assert settings is not None

    def test_default_database_dir(self):
        """DATABASE_DIR defaults to './data'."""
        settings = Settings()
        assert settings.DATABASE_DIR == "./data"

    def test_default_frontend_url(self):
        settings = Settings()
        assert settings.FRONTEND_URL == "http://localhost:3000"

    def test_default_snapshot_key(self):
        """The dashboard snapshot is stored under 'ninetyData'."""
        settings = Settings()
        assert settings.SNAPSHOT_KEY == "ninetyData"

    def test_default_upload_limit(self):
        settings = Settings()
        assert settings.MAX_UPLOAD_MB == 10
        assert settings.max_upload_bytes == 10 * 1024 * 1024


class TestSettingsEnvOverride:
    """Environment variable overrides are respected."""

    def test_database_dir_override(self, monkeypatch):
        monkeypatch.setenv("DATABASE_DIR", "/custom/data/path")
        settings = Settings()
        assert settings.DATABASE_DIR == "/custom/data/path"

    def test_frontend_url_override(self, monkeypatch):
        monkeypatch.setenv("FRONTEND_URL", "https://dashboard.example.com")
        settings = Settings()
        assert settings.FRONTEND_URL == "https://dashboard.example.com"

    def test_upload_limit_override(self, monkeypatch):
        """MAX_UPLOAD_MB is coerced from the env string."""
        monkeypatch.setenv("MAX_UPLOAD_MB", "2")
        settings = Settings()
        assert settings.max_upload_bytes == 2 * 1024 * 1024

    def test_log_level_override(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        settings = Settings()
        assert settings.LOG_LEVEL == "debug"

    def test_invalid_upload_limit_rejected(self, monkeypatch):
        monkeypatch.setenv("MAX_UPLOAD_MB", "lots")
        with pytest.raises(ValueError):
            Settings()

    def test_constructor_kwargs_win(self, monkeypatch):
        monkeypatch.setenv("SNAPSHOT_KEY", "fromEnv")
        settings = Settings(SNAPSHOT_KEY="explicit")
        assert settings.SNAPSHOT_KEY == "explicit"
