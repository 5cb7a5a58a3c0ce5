"""
Optional read-through response cache backed by Redis.

When REDIS_URL is not configured every call is a no-op / miss, so callers
always fall back to the database. Cache failures are logged and treated as
misses; they never fail a request.
"""
import json
from typing import Any, Callable, Optional

import redis
from fastapi.encoders import jsonable_encoder

from bookkeeper.core.config import settings
from bookkeeper.logger_config import logger


class ResponseCache:
    def __init__(self, url: Optional[str] = None, ttl: int = 60):
        self.ttl = ttl
        self._client: Optional[redis.Redis] = None
        if url:
            self._client = redis.Redis.from_url(url, decode_responses=True)
            logger.info("Response cache enabled")

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def get(self, key: str) -> Optional[Any]:
        if not self._client:
            return None
        try:
            cached = self._client.get(key)
        except redis.RedisError as e:
            logger.warning(f"Cache get failed for {key}: {str(e)}")
            return None
        return json.loads(cached) if cached else None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        if not self._client:
            return
        try:
            self._client.set(key, json.dumps(jsonable_encoder(value)), ex=ttl or self.ttl)
        except redis.RedisError as e:
            logger.warning(f"Cache set failed for {key}: {str(e)}")

    def delete(self, *keys: str) -> None:
        if not self._client or not keys:
            return
        try:
            self._client.delete(*keys)
        except redis.RedisError as e:
            logger.warning(f"Cache delete failed for {keys}: {str(e)}")

    def invalidate(self, collection: str) -> None:
        """Drop every cached key of a logical collection (`<collection>:*`)."""
        if not self._client:
            return
        try:
            keys = list(self._client.scan_iter(match=f"{collection}:*"))
            if keys:
                self._client.delete(*keys)
        except redis.RedisError as e:
            logger.warning(f"Cache invalidation failed for {collection}: {str(e)}")

    def get_or_compute(self, key: str, compute: Callable[[], Any], ttl: Optional[int] = None) -> Any:
        cached = self.get(key)
        if cached is not None:
            return cached
        value = jsonable_encoder(compute())
        self.set(key, value, ttl)
        return value


cache = ResponseCache(settings.REDIS_URL, ttl=settings.CACHE_TTL_SECONDS)
