"""
Key-value storage backends for conversation records.

'KeyValueStorage' is the pluggable persistence seam for the conversation
store. Values are opaque strings (serialized JSON records). Two backends are
provided:

    'InMemoryStorage' - dict-backed, used by tests and ephemeral servers.
    'JsonFileStorage' - durable store kept in a single JSON object on disk,
                        the per-client equivalent of browser local storage.

Both enforce an optional byte quota over the total size of keys and values
and raise 'StorageQuotaExceededError' when a write would exceed it.
"""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

from bookswap.config import StorageSettings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base class for key-value storage failures."""


class StorageQuotaExceededError(StorageError):
    """Raised when a write would grow the store past its quota."""


class KeyValueStorage(ABC):
    """Abstract string key-value store."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        self._quota_bytes = quota_bytes or None

    @abstractmethod
    def get(self, key: str) -> str | None:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    def keys(self, prefix: str = "") -> list[str]:
        pass

    def _check_quota(self, items: dict[str, str], key: str, value: str) -> None:
        if self._quota_bytes is None:
            return
        projected = {**items, key: value}
        size = sum(len(k.encode("utf-8")) + len(v.encode("utf-8")) for k, v in projected.items())
        if size > self._quota_bytes:
            raise StorageQuotaExceededError(
                f"Writing '{key}' needs {size} bytes; quota is {self._quota_bytes} bytes"
            )


class InMemoryStorage(KeyValueStorage):
    """Dict-backed storage."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        super().__init__(quota_bytes)
        self._items: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._check_quota(self._items, key, value)
        self._items[key] = value

    def delete(self, key: str) -> bool:
        return self._items.pop(key, None) is not None

    def keys(self, prefix: str = "") -> list[str]:
        return [key for key in self._items if key.startswith(prefix)]


class JsonFileStorage(KeyValueStorage):
    """Storage persisted as one JSON object of string values.

    The file is re-read on every call so separate processes sharing a path
    see each other's writes (last writer wins on each key).
    """

    def __init__(self, path: Path, quota_bytes: int | None = None) -> None:
        super().__init__(quota_bytes)
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        items = self._load()
        self._check_quota(items, key, value)
        items[key] = value
        self._write(items)

    def delete(self, key: str) -> bool:
        items = self._load()
        if key not in items:
            return False
        del items[key]
        self._write(items)
        return True

    def keys(self, prefix: str = "") -> list[str]:
        return [key for key in self._load() if key.startswith(prefix)]

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Cannot read storage file {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Storage file {self._path} does not contain a JSON object")
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def _write(self, items: dict[str, str]) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as handle:
                json.dump(items, handle, indent=2)
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise StorageError(f"Cannot write storage file {self._path}: {exc}") from exc


def create_storage(settings: StorageSettings) -> KeyValueStorage | None:
    """Build the configured storage backend, or None when disabled."""
    if settings.backend == "disabled":
        logger.warning("Conversation storage disabled; chat history will not be kept.")
        return None
    if settings.backend == "memory":
        return InMemoryStorage(quota_bytes=settings.quota_bytes)
    return JsonFileStorage(settings.path, quota_bytes=settings.quota_bytes)
