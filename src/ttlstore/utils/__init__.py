"""Configuration, logging and locking helpers."""

from .config import AppConfig, CacheConfig, ConfigError, RedisConfig
from .log import configure_logging
from .rwlock import RWLock

__all__ = [
    "AppConfig",
    "CacheConfig",
    "ConfigError",
    "RedisConfig",
    "RWLock",
    "configure_logging",
]
