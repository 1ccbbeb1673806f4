from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from typing import Mapping, Optional

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class ConfigError(ValueError):
    """Raised once at start-up when the configuration cannot be used."""


@dataclass(frozen=True)
class CacheConfig:
    ttl_seconds: int = 1800  # 30 minutes
    eviction_interval_ms: int = 1000  # 1 second

    @property
    def eviction_interval_seconds(self) -> float:
        return self.eviction_interval_ms / 1000.0


@dataclass(frozen=True)
class RedisConfig:
    host: str = "localhost:6379"
    username: str = ""
    password: str = dataclasses.field(default="", repr=False)
    db: int = 0
    prefix: Optional[str] = None

    @property
    def url(self) -> str:
        auth = ""
        if self.username or self.password:
            auth = f"{self.username}:{self.password}@"
        return f"redis://{auth}{self.host}/{self.db}"


@dataclass(frozen=True)
class AppConfig:
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8080
    use_redis: bool = False
    cache: CacheConfig = dataclasses.field(default_factory=CacheConfig)
    redis: RedisConfig = dataclasses.field(default_factory=RedisConfig)

    @property
    def backend(self) -> str:
        return "redis" if self.use_redis else "memory"

    def validate(self) -> "AppConfig":
        if self.cache.eviction_interval_ms <= 0:
            raise ConfigError(f"eviction_interval_ms must be positive, got {self.cache.eviction_interval_ms}")
        if self.cache.ttl_seconds < 0:
            raise ConfigError(f"ttl_seconds must not be negative, got {self.cache.ttl_seconds}")
        if not 0 < self.port < 65536:
            raise ConfigError(f"port out of range: {self.port}")
        if self.redis.db < 0:
            raise ConfigError(f"redis db must not be negative, got {self.redis.db}")
        return self

    @classmethod
    def from_env(
        cls,
        service_name: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "AppConfig":
        """Build the configuration from environment variables.

        Variables are read as ``{SERVICE}_{NAME}`` when a service name is given
        (or found in ``SERVICE_NAME``), otherwise as bare ``{NAME}``. Cache
        values live under ``CACHE_``; the bare ``TTL_SECONDS`` and
        ``EVICTION_INTERVAL_MS`` are accepted too.
        """
        env = os.environ if environ is None else environ
        if service_name is None:
            service_name = env.get("SERVICE_NAME") or None
        reader = _EnvReader(env, service_name)

        defaults = cls()
        cache = CacheConfig(
            ttl_seconds=reader.integer(
                ("CACHE_TTL_SECONDS", "TTL_SECONDS"), defaults.cache.ttl_seconds
            ),
            eviction_interval_ms=reader.integer(
                ("CACHE_EVICTION_INTERVAL_MS", "EVICTION_INTERVAL_MS"), defaults.cache.eviction_interval_ms
            ),
        )
        redis = RedisConfig(
            host=reader.string(("REDIS_HOST",), defaults.redis.host),
            username=reader.string(("REDIS_USERNAME",), defaults.redis.username),
            password=reader.string(("REDIS_PASSWORD",), defaults.redis.password),
            db=reader.integer(("REDIS_DB",), defaults.redis.db),
            prefix=reader.string(("REDIS_PREFIX",), "") or None,
        )
        return cls(
            debug=reader.boolean(("DEBUG",), defaults.debug),
            host=reader.string(("HOST",), defaults.host),
            port=reader.integer(("PORT",), defaults.port),
            use_redis=reader.boolean(("USE_REDIS",), defaults.use_redis),
            cache=cache,
            redis=redis,
        )


class _EnvReader:
    def __init__(self, env: Mapping[str, str], service_name: Optional[str]) -> None:
        self._env = env
        self._prefix = f"{service_name.upper()}_" if service_name else ""

    def _lookup(self, names) -> Optional[tuple]:
        for name in names:
            full = f"{self._prefix}{name}"
            if full in self._env:
                return full, self._env[full]
        # bare names still apply under a prefix, matching the unprefixed deployment layout
        if self._prefix:
            for name in names:
                if name in self._env:
                    return name, self._env[name]
        return None

    def string(self, names, default: str) -> str:
        found = self._lookup(names)
        return default if found is None else found[1]

    def integer(self, names, default: int) -> int:
        found = self._lookup(names)
        if found is None:
            return default
        name, raw = found
        try:
            return int(raw.strip())
        except ValueError as exc:
            raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc

    def boolean(self, names, default: bool) -> bool:
        found = self._lookup(names)
        if found is None:
            return default
        name, raw = found
        value = raw.strip().lower()
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
        raise ConfigError(f"{name} must be a boolean, got {raw!r}")
