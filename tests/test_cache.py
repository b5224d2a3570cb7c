"""Tests for the product cache implementations."""
import json
from unittest.mock import MagicMock

import pytest
import redis

from catalog.utils.cache import InMemoryCache, NullCache, RedisCache, build_cache


@pytest.fixture
def redis_client():
    return MagicMock(spec=redis.Redis)


def test_redis_cache_get_hit(redis_client):
    redis_client.get.return_value = json.dumps({"id": 1, "name": "Widget"})
    cache = RedisCache(redis_client)

    assert cache.get(1) == {"id": 1, "name": "Widget"}
    redis_client.get.assert_called_once_with("product:1")


def test_redis_cache_get_miss(redis_client):
    redis_client.get.return_value = None

    assert RedisCache(redis_client).get(1) is None


def test_redis_cache_get_degrades_on_error(redis_client):
    redis_client.get.side_effect = redis.ConnectionError("down")

    assert RedisCache(redis_client).get(1) is None


def test_redis_cache_put_without_ttl(redis_client):
    RedisCache(redis_client).put(3, {"id": 3})

    redis_client.set.assert_called_once_with("product:3", json.dumps({"id": 3}))
    redis_client.setex.assert_not_called()


def test_redis_cache_put_with_ttl(redis_client):
    RedisCache(redis_client, ttl=300).put(3, {"id": 3})

    redis_client.setex.assert_called_once_with("product:3", 300, json.dumps({"id": 3}))


def test_redis_cache_put_degrades_on_error(redis_client):
    redis_client.set.side_effect = redis.ConnectionError("down")

    RedisCache(redis_client).put(3, {"id": 3})


def test_redis_cache_invalidate(redis_client):
    RedisCache(redis_client).invalidate(5)

    redis_client.delete.assert_called_once_with("product:5")


def test_redis_cache_invalidate_propagates_errors(redis_client):
    redis_client.delete.side_effect = redis.ConnectionError("down")

    with pytest.raises(redis.ConnectionError):
        RedisCache(redis_client).invalidate(5)


def test_redis_cache_invalidate_all(redis_client):
    redis_client.scan_iter.return_value = iter(["product:1", "product:2"])

    RedisCache(redis_client).invalidate_all()

    redis_client.scan_iter.assert_called_once_with(match="product:*")
    redis_client.delete.assert_called_once_with("product:1", "product:2")


def test_redis_cache_invalidate_all_empty(redis_client):
    redis_client.scan_iter.return_value = iter([])

    RedisCache(redis_client).invalidate_all()

    redis_client.delete.assert_not_called()


def test_redis_cache_ping(redis_client):
    redis_client.ping.return_value = True
    assert RedisCache(redis_client).ping() is True

    redis_client.ping.side_effect = redis.ConnectionError("down")
    assert RedisCache(redis_client).ping() is False


def test_in_memory_cache():
    cache = InMemoryCache()
    cache.put(1, {"id": 1})
    cache.put(2, {"id": 2})

    assert cache.get(1) == {"id": 1}
    cache.invalidate(1)
    assert cache.get(1) is None
    assert cache.get(2) == {"id": 2}

    cache.invalidate_all()
    assert len(cache) == 0


def test_in_memory_cache_returns_copies():
    cache = InMemoryCache()
    value = {"id": 1}
    cache.put(1, value)
    value["id"] = 99

    assert cache.get(1) == {"id": 1}


def test_null_cache_stores_nothing():
    cache = NullCache()
    cache.put(1, {"id": 1})

    assert cache.get(1) is None


def test_build_cache():
    assert isinstance(build_cache("memory"), InMemoryCache)
    assert isinstance(build_cache("none"), NullCache)
    assert isinstance(build_cache("redis"), RedisCache)

    with pytest.raises(ValueError):
        build_cache("memcached")
