import logging
from typing import Optional

import redis
import redis.exceptions

from shortlinks.core.config import settings

logger = logging.getLogger(__name__)


class RedirectCache:
    """Read-through cache of shortlink -> link. Mappings never change, so entries never go stale."""

    def __init__(self, client: redis.Redis, ttl: int = settings.CACHE_TTL):
        self.client = client
        self.ttl = ttl

    @classmethod
    def from_url(cls, redis_url: str, ttl: int = settings.CACHE_TTL) -> "RedirectCache":
        # decode_responses=True returns str instead of bytes
        client = redis.Redis.from_url(redis_url, decode_responses=True, socket_connect_timeout=2)
        return cls(client, ttl)

    @staticmethod
    def key(shortlink: str) -> str:
        return f"url:{shortlink}"

    def get(self, shortlink: str) -> Optional[str]:
        try:
            cached = self.client.get(self.key(shortlink))
        except redis.exceptions.RedisError as e:
            logger.warning(f"Redis lookup failed for {shortlink}: {e}")
            return None

        if cached is None:
            return None
        if isinstance(cached, (bytes, bytearray)):
            cached = cached.decode()
        logger.info(f"Redirect cache HIT for {shortlink} -> {cached[:50]}")
        return cached

    def put(self, shortlink: str, link: str) -> None:
        try:
            self.client.setex(self.key(shortlink), self.ttl, link)
            logger.debug(f"Cached {shortlink} -> {link[:50]}")
        except redis.exceptions.RedisError as e:
            logger.warning(f"Failed to cache {shortlink}, Redis unavailable: {e}")

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.exceptions.RedisError:
            return False

    def close(self) -> None:
        self.client.close()


redirect_cache: Optional[RedirectCache] = (
    RedirectCache.from_url(settings.REDIS_URL) if settings.REDIS_URL else None
)


def get_cache() -> Optional[RedirectCache]:
    """FastAPI dependency: the process-wide redirect cache, or None when disabled."""
    return redirect_cache
