"""
Unit tests for configuration module.

Tests settings loading, validation, nested configuration, and caching.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from bookswap.config import (
    DEFAULT_QUOTA_BYTES,
    DEFAULT_STORAGE_PATH,
    ChatSettings,
    LoggingSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)


class TestStorageSettings:
    """Test conversation storage configuration."""

    def test_defaults(self, monkeypatch):
        """Defaults point at the per-user JSON file."""
        monkeypatch.delenv("STORAGE_BACKEND", raising=False)
        monkeypatch.delenv("STORAGE_PATH", raising=False)

        settings = StorageSettings()

        assert settings.backend == "file"
        assert settings.path == DEFAULT_STORAGE_PATH
        assert settings.quota_bytes == DEFAULT_QUOTA_BYTES == 5 * 1024 * 1024

    def test_env_overrides(self, tmp_path, monkeypatch):
        """Storage settings load from STORAGE_* variables."""
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        monkeypatch.setenv("STORAGE_PATH", str(tmp_path / "chat.json"))
        monkeypatch.setenv("STORAGE_QUOTA_BYTES", "0")

        settings = StorageSettings()

        assert settings.backend == "memory"
        assert settings.path == tmp_path / "chat.json"
        assert settings.quota_bytes == 0

    def test_path_expands_home(self, monkeypatch):
        """~ in the storage path is expanded."""
        monkeypatch.setenv("STORAGE_PATH", "~/bookswap-test/chat.json")

        settings = StorageSettings()

        assert settings.path == Path.home() / "bookswap-test" / "chat.json"

    def test_invalid_backend(self, monkeypatch):
        """Unknown backends are rejected."""
        monkeypatch.setenv("STORAGE_BACKEND", "redis")

        with pytest.raises(ValidationError):
            StorageSettings()

    def test_negative_quota_rejected(self, monkeypatch):
        monkeypatch.setenv("STORAGE_QUOTA_BYTES", "-1")

        with pytest.raises(ValidationError):
            StorageSettings()


class TestChatSettings:
    """Test chat behavior configuration."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("CHAT_DEFAULT_SENDER_NAME", raising=False)
        monkeypatch.delenv("CHAT_PREVIEW_LENGTH", raising=False)

        settings = ChatSettings()

        assert settings.default_sender_name == "You"
        assert settings.preview_length == 50

    def test_custom_values(self, monkeypatch):
        monkeypatch.setenv("CHAT_DEFAULT_SENDER_NAME", "Reader")
        monkeypatch.setenv("CHAT_PREVIEW_LENGTH", "80")

        settings = ChatSettings()

        assert settings.default_sender_name == "Reader"
        assert settings.preview_length == 80

    def test_preview_length_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("CHAT_PREVIEW_LENGTH", "0")

        with pytest.raises(ValidationError):
            ChatSettings()


class TestLoggingSettings:
    """Test logging configuration."""

    def test_valid_logging_settings(self, monkeypatch):
        """Valid logging settings load correctly."""
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("LOG_FILE", raising=False)

        settings = LoggingSettings()

        assert settings.level == "INFO"
        assert "%(asctime)s" in settings.format
        assert settings.file is None

    def test_invalid_log_level(self, monkeypatch):
        """Invalid log level is rejected."""
        monkeypatch.setenv("LOG_LEVEL", "INVALID")

        with pytest.raises(ValidationError):
            LoggingSettings()

    def test_configure_logging(self, monkeypatch):
        """configure() sets up Python logging."""
        import logging

        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        monkeypatch.delenv("LOG_FILE", raising=False)

        LoggingSettings().configure()

        assert logging.root.level == logging.WARNING

    def test_configure_logging_with_file(self, tmp_path, monkeypatch):
        """configure() adds a file handler when a path is provided."""
        import logging

        log_file = tmp_path / "logs" / "bookswap.log"
        monkeypatch.setenv("LOG_FILE", str(log_file))

        LoggingSettings().configure()

        file_handlers = [h for h in logging.root.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert log_file.parent.exists()
        for handler in file_handlers:
            logging.root.removeHandler(handler)
            handler.close()


class TestSettings:
    """Test main Settings class."""

    def test_nested_settings(self, isolated_settings, monkeypatch):
        """Settings load with all nested configurations."""
        monkeypatch.delenv("APP_NAME", raising=False)

        settings = Settings()

        assert settings.app_name == "BookSwap"
        assert settings.storage.backend == "file"
        assert settings.storage.path == isolated_settings
        assert settings.chat.default_sender_name
        assert settings.logging.level in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

    def test_production_environment(self, monkeypatch):
        """Production environment is detected."""
        monkeypatch.setenv("ENVIRONMENT", "production")

        settings = Settings()

        assert settings.is_production is True
        assert settings.is_development is False

    def test_custom_api_settings(self, monkeypatch):
        """Custom API host and port can be set."""
        monkeypatch.setenv("API_HOST", "127.0.0.1")
        monkeypatch.setenv("API_PORT", "9000")

        settings = Settings()

        assert settings.api_host == "127.0.0.1"
        assert settings.api_port == 9000

    def test_invalid_port(self, monkeypatch):
        monkeypatch.setenv("API_PORT", "70000")

        with pytest.raises(ValidationError):
            Settings()


class TestGetSettings:
    """Test settings factory function."""

    def test_get_settings_cached(self):
        """get_settings() returns cached instance."""
        settings1 = get_settings()
        settings2 = get_settings()

        assert isinstance(settings1, Settings)
        assert settings1 is settings2

    def test_clear_settings_cache(self, monkeypatch):
        """clear_settings_cache() forces reload."""
        monkeypatch.setenv("STORAGE_BACKEND", "file")
        settings1 = get_settings()

        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        clear_settings_cache()
        settings2 = get_settings()

        assert settings1.storage.backend == "file"
        assert settings2.storage.backend == "memory"
        assert settings1 is not settings2
