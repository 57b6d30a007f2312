# storefront/services/storage.py
import json
import os
from pathlib import Path
from typing import Any

import redis
from redis.exceptions import RedisError

from storefront.utils.logging import get_logger
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL, STORAGE_BACKEND, STORAGE_PATH

logger = get_logger(__name__)

CART_ITEMS_KEY = "cart.items"
AUTH_TOKEN_KEY = "auth.token"
AUTH_USER_KEY = "auth.user"
DEMO_USER_KEY = "demo_user"
RECENTLY_VIEWED_KEY = "recently_viewed_ids"


class LocalStorage:
    """
    Client-side key/value store with JSON values.

    Every operation is best effort: a failing backend is logged and the
    caller carries on (``get`` falls back to ``default``). Nothing here
    is schema-versioned.
    """

    def _read(self, key: str) -> str | None:
        raise NotImplementedError

    def _write(self, key: str, raw: str) -> None:
        raise NotImplementedError

    def _delete(self, key: str) -> None:
        raise NotImplementedError

    def get(self, key: str, default: Any = None) -> Any:
        try:
            raw = self._read(key)
            return json.loads(raw) if raw is not None else default
        except (OSError, ValueError, RedisError) as e:
            logger.warning(f"Local storage read failed for {key}: {e}")
            return default

    def set(self, key: str, value: Any) -> None:
        try:
            self._write(key, json.dumps(value, default=str))
        except (OSError, ValueError, TypeError, RedisError) as e:
            logger.warning(f"Local storage write failed for {key}: {e}")

    def remove(self, key: str) -> None:
        try:
            self._delete(key)
        except (OSError, ValueError, RedisError) as e:
            logger.warning(f"Local storage delete failed for {key}: {e}")


class MemoryStorage(LocalStorage):
    def __init__(self):
        self._data: dict[str, str] = {}

    def _read(self, key):
        return self._data.get(key)

    def _write(self, key, raw):
        self._data[key] = raw

    def _delete(self, key):
        self._data.pop(key, None)


class JsonFileStorage(LocalStorage):
    """All keys in one JSON document on disk, rewritten on every change."""

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        return json.loads(self.path.read_text(encoding="utf-8") or "{}")

    def _dump(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data), encoding="utf-8")
        os.replace(tmp, self.path)

    def _read(self, key):
        return self._load().get(key)

    def _write(self, key, raw):
        data = self._load()
        data[key] = raw
        self._dump(data)

    def _delete(self, key):
        data = self._load()
        if data.pop(key, None) is not None:
            self._dump(data)


class RedisStorage(LocalStorage):
    def __init__(self, client: redis.Redis | None = None, prefix: str = "storefront:"):
        self.redis = client if client is not None else redis.Redis.from_url(REDIS_URL, decode_responses=True)
        self.prefix = prefix

    @redis_retry()
    def _read(self, key):
        return self.redis.get(self.prefix + key)

    @redis_retry()
    def _write(self, key, raw):
        self.redis.set(self.prefix + key, raw)

    @redis_retry()
    def _delete(self, key):
        self.redis.delete(self.prefix + key)


def build_storage(backend: str | None = None) -> LocalStorage:
    backend = backend or STORAGE_BACKEND
    if backend == "redis":
        return RedisStorage()
    if backend == "memory":
        return MemoryStorage()
    return JsonFileStorage(STORAGE_PATH)
