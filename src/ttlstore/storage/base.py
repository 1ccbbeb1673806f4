from __future__ import annotations

import threading
import typing as t
from abc import ABC, abstractmethod

from ..cache.ttl_store import TTLStore
from ..utils.config import CacheConfig


class BackendError(Exception):
    """A cache backend could not complete an operation."""


class CacheBackend(ABC):
    """Two-operation capability the HTTP layer needs from a cache."""

    name: str = "backend"

    @abstractmethod
    async def set(self, key: str, value: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def get(self, key: str) -> t.Tuple[t.Optional[str], bool]:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    async def is_healthy(self) -> bool:  # pragma: no cover - interface
        raise NotImplementedError

    async def close(self) -> None:
        return None


class MemoryBackend(CacheBackend):
    """In-process backend over a ``TTLStore[str]``.

    Store operations only take a short in-memory lock, so they are called
    directly from the event loop.
    """

    name = "memory"

    def __init__(self, store: t.Optional[TTLStore[str]] = None) -> None:
        self._store: TTLStore[str] = store if store is not None else TTLStore()

    @classmethod
    def from_config(cls, config: CacheConfig, *, cancel: t.Optional[threading.Event] = None) -> "MemoryBackend":
        return cls(TTLStore.from_config(config, cancel=cancel))

    @property
    def store(self) -> TTLStore[str]:
        return self._store

    async def set(self, key: str, value: str) -> None:
        self._store.set(key, value)

    async def get(self, key: str) -> t.Tuple[t.Optional[str], bool]:
        return self._store.get(key)

    async def is_healthy(self) -> bool:
        return True

    async def close(self) -> None:
        self._store.stop_eviction()
