from __future__ import annotations

import dataclasses
import logging
import threading
import typing as t

import click
import uvicorn
from dotenv import load_dotenv

from ttlstore.server import create_app
from ttlstore.storage import create_backend
from ttlstore.utils.config import AppConfig, ConfigError
from ttlstore.utils.log import configure_logging

logger = logging.getLogger(__name__)


def resolve_config(
    *,
    host: t.Optional[str] = None,
    port: t.Optional[int] = None,
    backend: t.Optional[str] = None,
    ttl_seconds: t.Optional[int] = None,
    eviction_interval_ms: t.Optional[int] = None,
    debug: t.Optional[bool] = None,
    service_name: t.Optional[str] = None,
) -> AppConfig:
    """Environment configuration with command-line values layered on top."""
    config = AppConfig.from_env(service_name=service_name)

    top: t.Dict[str, t.Any] = {}
    if host is not None:
        top["host"] = host
    if port is not None:
        top["port"] = port
    if debug is not None:
        top["debug"] = debug
    if backend is not None:
        top["use_redis"] = backend.lower() == "redis"

    cache: t.Dict[str, t.Any] = {}
    if ttl_seconds is not None:
        cache["ttl_seconds"] = ttl_seconds
    if eviction_interval_ms is not None:
        cache["eviction_interval_ms"] = eviction_interval_ms
    if cache:
        top["cache"] = dataclasses.replace(config.cache, **cache)

    return dataclasses.replace(config, **top).validate()


@click.command()
@click.option("--host", default=None, help="Interface to bind (env: HOST, default 0.0.0.0)")
@click.option("--port", type=int, default=None, help="Port to listen on (env: PORT, default 8080)")
@click.option(
    "--backend",
    type=click.Choice(["memory", "redis"], case_sensitive=False),
    default=None,
    help="Cache backend (env: USE_REDIS, default memory)",
)
@click.option("--redis-url", default=None, help="Redis URL, overrides REDIS_HOST/REDIS_DB")
@click.option("--ttl-seconds", type=int, default=None, help="Entry TTL in seconds (default 1800)")
@click.option(
    "--eviction-interval-ms",
    type=int,
    default=None,
    help="Sweep interval of the in-memory cache in milliseconds (default 1000)",
)
@click.option("--debug/--no-debug", default=None, help="Enable debug logging")
@click.option("--env-file", default=".env", show_default=True, help="Dotenv file loaded before reading the environment")
def main(
    host: t.Optional[str],
    port: t.Optional[int],
    backend: t.Optional[str],
    redis_url: t.Optional[str],
    ttl_seconds: t.Optional[int],
    eviction_interval_ms: t.Optional[int],
    debug: t.Optional[bool],
    env_file: str,
) -> None:
    """Run the TTL cache HTTP service."""
    load_dotenv(env_file)
    try:
        config = resolve_config(
            host=host,
            port=port,
            backend=backend,
            ttl_seconds=ttl_seconds,
            eviction_interval_ms=eviction_interval_ms,
            debug=debug,
        )
    except ConfigError as exc:
        raise click.ClickException(f"error loading config: {exc}") from exc

    configure_logging(debug=config.debug)
    logger.debug("Config loaded: %s", config)

    shutdown = threading.Event()
    cache_backend = create_backend(config, redis_url=redis_url, cancel=shutdown)
    app = create_app(cache_backend, debug=config.debug)

    logger.info("Listening on %s:%d backend=%s", config.host, config.port, config.backend)
    try:
        uvicorn.run(app, host=config.host, port=config.port, log_config=None)
    finally:
        shutdown.set()


if __name__ == "__main__":
    main()
