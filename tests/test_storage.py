"""
Unit Tests: local storage backends
"""

from unittest.mock import MagicMock

import fakeredis
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from storefront.services.storage import (
    CART_ITEMS_KEY,
    JsonFileStorage,
    MemoryStorage,
    RedisStorage,
    build_storage,
)


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture(params=["memory", "file", "redis"])
def backend(request, tmp_path, fake_redis):
    if request.param == "memory":
        return MemoryStorage()
    if request.param == "file":
        return JsonFileStorage(tmp_path / "local_storage.json")
    return RedisStorage(fake_redis)


class TestBackends:
    def test_set_get_remove(self, backend):
        backend.set(CART_ITEMS_KEY, [{"id": 1, "quantity": 2}])

        assert backend.get(CART_ITEMS_KEY) == [{"id": 1, "quantity": 2}]

        backend.remove(CART_ITEMS_KEY)
        assert backend.get(CART_ITEMS_KEY) is None

    def test_missing_key_returns_default(self, backend):
        assert backend.get("nothing", []) == []

    def test_remove_missing_key(self, backend):
        backend.remove("nothing")

        assert backend.get("nothing") is None


class TestJsonFileStorage:
    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "nested" / "storage.json"
        JsonFileStorage(path).set("demo_user", {"id": "demo_user_1"})

        assert JsonFileStorage(path).get("demo_user") == {"id": "demo_user_1"}

    def test_corrupted_file_is_not_fatal(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("{not json", encoding="utf-8")
        storage = JsonFileStorage(path)

        assert storage.get(CART_ITEMS_KEY, []) == []
        storage.set(CART_ITEMS_KEY, [])


class TestRedisStorage:
    def test_keys_are_prefixed(self, fake_redis):
        RedisStorage(fake_redis, prefix="shop:").set("auth.token", "abc")

        assert fake_redis.get("shop:auth.token") == '"abc"'

    def test_unreachable_redis_is_retried_then_ignored(self):
        client = MagicMock()
        client.get.side_effect = RedisConnectionError("refused")

        storage = RedisStorage(client)

        assert storage.get("auth.token", "fallback") == "fallback"
        assert client.get.call_count == 3


def test_build_storage():
    assert isinstance(build_storage("memory"), MemoryStorage)
