"""Shared fixtures and mocks for unit tests."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock

import pytest

from ttlstore.cache import TTLStore
from ttlstore.monitoring.metrics import reset_all


class FakeClock:
    def __init__(self, initial: float = 1000.0):
        self._value = initial

    def now(self) -> float:
        return self._value

    def advance(self, seconds: float) -> None:
        self._value += seconds


@pytest.fixture(autouse=True)
def reset_metrics():
    """Start every test from zeroed counters."""
    reset_all()
    yield
    reset_all()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    """TTL store on a fake clock with the sweep thread not started."""
    s = TTLStore(ttl_seconds=10, eviction_interval_seconds=1.0, start_eviction=False, time_func=clock.now)
    yield s
    s.stop_eviction()


@pytest.fixture
def mock_redis():
    """Mock redis.asyncio client."""
    client = AsyncMock()
    client.set = AsyncMock(return_value=True)
    client.get = AsyncMock(return_value=None)
    client.ping = AsyncMock(return_value=True)
    client.aclose = AsyncMock(return_value=None)
    return client


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way the test found it."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


ENV_NAMES = [
    "SERVICE_NAME",
    "DEBUG",
    "HOST",
    "PORT",
    "USE_REDIS",
    "TTL_SECONDS",
    "EVICTION_INTERVAL_MS",
    "CACHE_TTL_SECONDS",
    "CACHE_EVICTION_INTERVAL_MS",
    "REDIS_HOST",
    "REDIS_USERNAME",
    "REDIS_PASSWORD",
    "REDIS_DB",
    "REDIS_PREFIX",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable the configuration reads.

    Each name is set before it is deleted so monkeypatch also undoes values a
    test (or a loaded .env file) adds later.
    """
    for name in ENV_NAMES:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch
