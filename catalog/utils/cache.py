import json
import logging
import threading
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Optional

import redis

from catalog.config import get_settings

logger = logging.getLogger(__name__)


class ProductCache(ABC):
    """
    Read-through cache for product details, keyed by product ID.

    Entries are plain JSON-compatible dicts. The cache is advisory: a miss
    always falls back to the database, so implementations may drop entries
    at any time.
    """

    @abstractmethod
    def get(self, key: int) -> Optional[dict]:
        """Return the cached value or None on a miss."""

    @abstractmethod
    def put(self, key: int, value: dict) -> None:
        """Store a value under the given key."""

    @abstractmethod
    def invalidate(self, key: int) -> None:
        """Remove a single entry."""

    @abstractmethod
    def invalidate_all(self) -> None:
        """Remove every entry."""

    def ping(self) -> bool:
        return True


class NullCache(ProductCache):
    """Cache that stores nothing. Used when caching is disabled."""

    def get(self, key: int) -> Optional[dict]:
        return None

    def put(self, key: int, value: dict) -> None:
        pass

    def invalidate(self, key: int) -> None:
        pass

    def invalidate_all(self) -> None:
        pass


class InMemoryCache(ProductCache):
    """Process-local cache backed by a dict."""

    def __init__(self):
        self._entries: dict[int, dict] = {}
        self._lock = threading.Lock()

    def get(self, key: int) -> Optional[dict]:
        with self._lock:
            value = self._entries.get(key)
            return dict(value) if value is not None else None

    def put(self, key: int, value: dict) -> None:
        with self._lock:
            self._entries[key] = dict(value)

    def invalidate(self, key: int) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def invalidate_all(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: int) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisCache(ProductCache):
    """
    Redis cache for product details.

    Values are JSON serialized under namespaced keys (``product:<id>``).
    Reads and writes degrade to a miss / no-op when Redis is unavailable.
    Invalidation errors are raised to the caller.
    """

    def __init__(self, client: redis.Redis, prefix: str = "product", ttl: int = 0):
        self.client = client
        self.prefix = prefix
        self.ttl = ttl

    def _make_key(self, key: Any) -> str:
        """Create a namespaced cache key."""
        return f"{self.prefix}:{key}"

    def get(self, key: int) -> Optional[dict]:
        cache_key = self._make_key(key)
        try:
            value = self.client.get(cache_key)
            if value:
                return json.loads(value)
            return None
        except (redis.RedisError, json.JSONDecodeError) as e:
            logger.warning(f"Cache read failed for {cache_key}: {e}")
            return None

    def put(self, key: int, value: dict) -> None:
        cache_key = self._make_key(key)
        try:
            serialized = json.dumps(value, default=str)
            if self.ttl > 0:
                self.client.setex(cache_key, self.ttl, serialized)
            else:
                self.client.set(cache_key, serialized)
        except (redis.RedisError, TypeError) as e:
            logger.warning(f"Cache write failed for {cache_key}: {e}")

    def invalidate(self, key: int) -> None:
        self.client.delete(self._make_key(key))

    def invalidate_all(self) -> None:
        keys = list(self.client.scan_iter(match=self._make_key("*")))
        if keys:
            self.client.delete(*keys)

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False


def build_cache(backend: str) -> ProductCache:
    """Create the cache implementation named by ``backend``."""
    settings = get_settings()
    if backend == "redis":
        client = redis.from_url(settings.REDIS_URL, decode_responses=True)
        return RedisCache(client, ttl=settings.CACHE_TTL)
    if backend == "memory":
        return InMemoryCache()
    if backend == "none":
        return NullCache()
    raise ValueError(f"Unknown cache backend: {backend}")


@lru_cache
def get_cache() -> ProductCache:
    """Dependency returning the process-wide product cache."""
    backend = get_settings().CACHE_BACKEND
    logger.info(f"Using '{backend}' product cache")
    return build_cache(backend)
