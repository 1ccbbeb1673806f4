from __future__ import annotations

import logging
import threading
import typing as t

from ttlstore.utils.config import AppConfig

from .base import CacheBackend, MemoryBackend
from .redis_adapter import RedisBackend

_logger = logging.getLogger(__name__)


def create_backend(
    config: AppConfig,
    *,
    redis_url: t.Optional[str] = None,
    cancel: t.Optional[threading.Event] = None,
) -> CacheBackend:
    """Build the backend selected by ``config.use_redis``.

    ``redis_url`` overrides the URL assembled from ``config.redis``. ``cancel``
    bounds the lifetime of the in-memory sweep thread and is ignored for Redis.
    """
    if config.use_redis:
        _logger.info("Using redis as the cache")
        return RedisBackend.from_config(config.cache, config.redis, url=redis_url)
    _logger.info("Using in-memory cache")
    return MemoryBackend.from_config(config.cache, cancel=cancel)
