"""
Pytest configuration and shared fixtures.

This module provides fixtures and configuration used across all tests.
"""

import logging
from datetime import UTC, datetime, timedelta

import pytest

from bookswap.conversations import ConversationStore, InMemoryStorage, MessageEventBus

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests (requires a running server or shared storage)",
    )


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (may require external services)"
    )
    config.addinivalue_line("markers", "unit: mark test as unit test (default)")


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless explicitly enabled."""
    if config.getoption("--run-integration"):
        return
    skip_integration = pytest.mark.skip(
        reason="Integration tests disabled (use --run-integration to enable)."
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(autouse=True)
def configure_test_logging(caplog):
    """
    Configure logging for tests.

    Sets up log capture and configures log levels.
    This fixture runs automatically for all tests.
    """
    caplog.set_level(logging.DEBUG)
    yield


# ============================================================================
# Environment and Configuration
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """
    Point settings at a throwaway storage file for every test.

    Clears the settings cache before and after so env changes made by a test
    are picked up and do not leak.
    """
    from bookswap.config import clear_settings_cache

    clear_settings_cache()
    storage_path = tmp_path / "conversations.json"
    monkeypatch.setenv("BOOKSWAP_ENV_SOURCE", "environment")
    monkeypatch.setenv("STORAGE_BACKEND", "file")
    monkeypatch.setenv("STORAGE_PATH", str(storage_path))
    yield storage_path
    clear_settings_cache()


# ============================================================================
# Conversation Fixtures
# ============================================================================


class FakeClock:
    """Deterministic clock advancing one second per reading."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2026, 3, 1, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


@pytest.fixture
def clock() -> FakeClock:
    """Clock shared by a test's store."""
    return FakeClock()


@pytest.fixture
def storage() -> InMemoryStorage:
    """Empty in-memory key-value storage."""
    return InMemoryStorage()


@pytest.fixture
def bus() -> MessageEventBus:
    """Isolated message event bus."""
    return MessageEventBus()


@pytest.fixture
def store(storage, bus, clock) -> ConversationStore:
    """Conversation store over in-memory storage with a fake clock."""
    return ConversationStore(storage=storage, bus=bus, clock=clock)
