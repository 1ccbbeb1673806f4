from .base import BackendError, CacheBackend, MemoryBackend
from .factory import create_backend
from .redis_adapter import RedisBackend

__all__ = ["BackendError", "CacheBackend", "MemoryBackend", "RedisBackend", "create_backend"]
