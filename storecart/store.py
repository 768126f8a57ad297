"""
Persistent Store - key-value storage for cart, order and expiration data.

Provides three backends behind one interface:
- RedisStore: Upstash Redis (production)
- FileStore: single JSON document on local disk
- MemoryStore: process memory (tests, ephemeral sessions)

Values are plain strings. Callers serialize and parse JSON themselves.
Any backend failure surfaces as StorageFailure.
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from storecart.config import Settings
from storecart.errors import ERROR_STORAGE_READ, ERROR_STORAGE_WRITE, StorageFailure
from storecart.logging import get_logger

logger = get_logger(__name__)


class StoreKeys:
    """Key names for persisted session data."""

    CART = "cart"
    LAST_ORDER = "last_order"
    ORDER_TIME = "order_time"

    def __init__(self, prefix: str = "yakebda_") -> None:
        self.prefix = prefix

    @property
    def cart(self) -> str:
        return f"{self.prefix}{self.CART}"

    @property
    def last_order(self) -> str:
        return f"{self.prefix}{self.LAST_ORDER}"

    @property
    def order_time(self) -> str:
        return f"{self.prefix}{self.ORDER_TIME}"


class PersistentStore(ABC):
    """String-keyed store of string values."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete key. Removing an absent key is a no-op."""


class MemoryStore(PersistentStore):
    """Dict-backed store."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class FileStore(PersistentStore):
    """
    All keys in one JSON object file.

    Writes replace the whole file through a temp file + rename, so readers
    never see a half-written document.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._data: Optional[dict[str, str]] = None

    def _load(self) -> dict[str, str]:
        if self._data is not None:
            return self._data

        try:
            raw = self.path.read_text(encoding="utf-8")
        except (FileNotFoundError, NotADirectoryError):
            self._data = {}
            return self._data
        except OSError as e:
            logger.error(f"Failed to read store file {self.path}: {e}")
            raise StorageFailure(f"{ERROR_STORAGE_READ}: {e}") from e

        try:
            data = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as e:
            logger.error(f"Store file {self.path} is not valid JSON: {e}")
            raise StorageFailure(f"{ERROR_STORAGE_READ}: {e}") from e

        if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
            raise StorageFailure(f"{ERROR_STORAGE_READ}: store file must hold a JSON object of strings")

        self._data = data
        return self._data

    def _flush(self, data: dict[str, str], key: str) -> None:
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(data, fh, ensure_ascii=False)
                os.replace(tmp_path, self.path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error(f"Failed to write store file {self.path}: {e}")
            raise StorageFailure(f"{ERROR_STORAGE_WRITE}: {e}", key=key) from e

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        current = self._load()
        updated = {**current, key: value}
        self._flush(updated, key)
        self._data = updated

    def remove(self, key: str) -> None:
        current = self._load()
        if key not in current:
            return
        updated = {k: v for k, v in current.items() if k != key}
        self._flush(updated, key)
        self._data = updated


class RedisStore(PersistentStore):
    """Upstash Redis backed store (sync client)."""

    def __init__(self, client=None, url: str = "", token: str = "") -> None:
        self._client = client
        self._url = url
        self._token = token

    @property
    def client(self):
        """Get Redis client (lazy initialization)."""
        if self._client is None:
            if not self._url or not self._token:
                raise StorageFailure("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
            from upstash_redis import Redis

            self._client = Redis(url=self._url, token=self._token)
        return self._client

    def get(self, key: str) -> Optional[str]:
        try:
            value = self.client.get(key)
        except StorageFailure:
            raise
        except Exception as e:
            logger.error(f"Failed to get {key} from Redis: {e}")
            raise StorageFailure(f"{ERROR_STORAGE_READ}: {e}", key=key) from e
        if value is None:
            return None
        return value.decode("utf-8") if isinstance(value, bytes) else str(value)

    def set(self, key: str, value: str) -> None:
        try:
            self.client.set(key, value)
        except StorageFailure:
            raise
        except Exception as e:
            logger.error(f"Failed to set {key} in Redis: {e}")
            raise StorageFailure(f"{ERROR_STORAGE_WRITE}: {e}", key=key) from e

    def remove(self, key: str) -> None:
        try:
            self.client.delete(key)
        except StorageFailure:
            raise
        except Exception as e:
            logger.error(f"Failed to delete {key} from Redis: {e}")
            raise StorageFailure(f"{ERROR_STORAGE_WRITE}: {e}", key=key) from e


def create_store(settings: Settings) -> PersistentStore:
    """Build the store backend selected by settings.backend."""
    if settings.backend == "redis":
        return RedisStore(url=settings.redis_url, token=settings.redis_token)
    if settings.backend == "memory":
        return MemoryStore()
    return FileStore(settings.store_file)
