from __future__ import annotations

import logging
import typing as t

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ttlstore.monitoring.metrics import ttlstore_backend_errors_total
from ttlstore.utils.config import CacheConfig, RedisConfig

from .base import BackendError, CacheBackend

_logger = logging.getLogger(__name__)

# redis-py wraps most socket failures, but a raw OSError can still surface
_TRANSPORT_ERRORS = (RedisError, OSError)


class RedisBackend(CacheBackend):
    """Redis-backed cache backend.

    - Values are stored as plain strings at `key`, or `{prefix}:{key}` when a prefix is set
    - Expiry is delegated to Redis via `SET ... EX ttl`; a ttl of 0 stores without expiry
    - Reads fail as misses (logged); writes raise `BackendError`
    - One attempt per call, no retries and no local caching
    """

    name = "redis"

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        *,
        ttl_seconds: int = 0,
        prefix: t.Optional[str] = None,
        client: t.Optional[t.Any] = None,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError(f"ttl_seconds must not be negative, got {ttl_seconds}")
        self._ttl = int(ttl_seconds)
        self._prefix = prefix.rstrip(":") if prefix else None
        self._redis = client if client is not None else Redis.from_url(url, decode_responses=True)

    @classmethod
    def from_config(
        cls, cache: CacheConfig, redis: RedisConfig, *, url: t.Optional[str] = None
    ) -> "RedisBackend":
        """``url`` replaces the one assembled from ``redis``; TTL 0 stores without expiry."""
        return cls(url or redis.url, ttl_seconds=cache.ttl_seconds, prefix=redis.prefix)

    @property
    def ttl_seconds(self) -> int:
        return self._ttl

    def _key(self, key: str) -> str:
        if self._prefix:
            return f"{self._prefix}:{key}"
        return key

    async def set(self, key: str, value: str) -> None:
        try:
            await self._redis.set(self._key(key), value, ex=self._ttl or None)
        except _TRANSPORT_ERRORS as exc:
            ttlstore_backend_errors_total.inc(op="set")
            _logger.error("Failed to set value in redis cache: key=%s error=%s", key, exc)
            raise BackendError(f"redis set failed for key {key!r}") from exc

    async def get(self, key: str) -> t.Tuple[t.Optional[str], bool]:
        try:
            raw = await self._redis.get(self._key(key))
        except _TRANSPORT_ERRORS as exc:
            ttlstore_backend_errors_total.inc(op="get")
            _logger.error("Failed to get value from redis cache: key=%s error=%s", key, exc)
            return None, False
        if raw is None:
            return None, False
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode()
        return raw, True

    async def is_healthy(self) -> bool:
        try:
            pong = await self._redis.ping()
        except _TRANSPORT_ERRORS as exc:
            _logger.warning("Redis health check failed: %s", exc)
            return False
        return bool(pong)

    async def close(self) -> None:
        await self._redis.aclose()
