"""ttlstore

A key-value cache with per-entry expiry, served over HTTP from either an
in-process TTL store or Redis.
"""

from .cache import Entry, SweepState, TTLStore
from .server import create_app
from .storage import (
    BackendError,
    CacheBackend,
    MemoryBackend,
    RedisBackend,
    create_backend,
)
from .utils.config import AppConfig, CacheConfig, ConfigError, RedisConfig

__all__ = [
    "TTLStore",
    "Entry",
    "SweepState",
    "CacheBackend",
    "MemoryBackend",
    "RedisBackend",
    "BackendError",
    "create_backend",
    "create_app",
    "AppConfig",
    "CacheConfig",
    "RedisConfig",
    "ConfigError",
]

__version__ = "0.1.0"
