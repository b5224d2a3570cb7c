import os
from functools import lru_cache


class Settings:
    """Runtime configuration read from environment variables."""

    # Database
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./catalog.db")

    # Cache: "redis", "memory" or "none"
    CACHE_BACKEND = os.getenv("CACHE_BACKEND", "redis").lower()
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    # 0 keeps entries until they are invalidated
    CACHE_TTL = int(os.getenv("CACHE_TTL", "0"))

    # HTTP server
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "8000"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


@lru_cache
def get_settings() -> Settings:
    return Settings()
