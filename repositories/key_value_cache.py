import json
import logging
import os
import sqlite3
import threading
from abc import ABC, abstractmethod
from datetime import datetime

logger = logging.getLogger(__name__)


class CacheWriteError(RuntimeError):
    """Underlying cache write failed."""


class KeyValueCache(ABC):
    """Durable string-keyed store. No transactions across keys."""

    @abstractmethod
    def get_item(self, key):
        raise NotImplementedError

    @abstractmethod
    def set_item(self, key, value):
        raise NotImplementedError

    @abstractmethod
    def remove_item(self, key):
        raise NotImplementedError

    @abstractmethod
    def keys(self):
        raise NotImplementedError


class JsonFileCache(KeyValueCache):
    """All entries in one JSON object on disk; the file is re-read on every call."""

    def __init__(self, path):
        self.path = os.path.abspath(path)
        self._lock = threading.RLock()
        os.makedirs(os.path.dirname(self.path), exist_ok=True)

    def _load(self, strict=False):
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            if strict:
                raise CacheWriteError(f"Cache file unreadable: {self.path}: {exc}") from exc
            logger.warning("[CACHE] Unreadable cache file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            if strict:
                raise CacheWriteError(f"Cache file is not a JSON object: {self.path}")
            logger.warning("[CACHE] Cache file %s is not a JSON object", self.path)
            return {}
        return data

    def _save(self, data):
        tmp = f"{self.path}.tmp"
        try:
            with open(tmp, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp, self.path)
        except OSError as exc:
            raise CacheWriteError(f"Failed to write cache file {self.path}: {exc}") from exc

    def get_item(self, key):
        with self._lock:
            value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key, value):
        with self._lock:
            data = self._load(strict=True)
            data[key] = str(value)
            self._save(data)

    def remove_item(self, key):
        with self._lock:
            data = self._load(strict=True)
            if key in data:
                del data[key]
                self._save(data)

    def keys(self):
        with self._lock:
            return sorted(self._load().keys())


class SqliteCache(KeyValueCache):
    def __init__(self, db_path):
        self.db_path = db_path
        os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        with self._lock:
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_items (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            self._conn.commit()

    def get_item(self, key):
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM kv_items WHERE key = ?",
                (key,)
            ).fetchone()
        return row[0] if row else None

    def set_item(self, key, value):
        try:
            with self._lock:
                self._conn.execute(
                    "INSERT OR REPLACE INTO kv_items(key, value, updated_at) VALUES (?, ?, ?)",
                    (key, str(value), datetime.utcnow().isoformat() + "Z")
                )
                self._conn.commit()
        except sqlite3.Error as exc:
            raise CacheWriteError(f"Failed to write key={key}: {exc}") from exc

    def remove_item(self, key):
        try:
            with self._lock:
                self._conn.execute("DELETE FROM kv_items WHERE key = ?", (key,))
                self._conn.commit()
        except sqlite3.Error as exc:
            raise CacheWriteError(f"Failed to remove key={key}: {exc}") from exc

    def keys(self):
        with self._lock:
            rows = self._conn.execute("SELECT key FROM kv_items ORDER BY key").fetchall()
        return [row[0] for row in rows]

    def close(self):
        with self._lock:
            self._conn.close()
