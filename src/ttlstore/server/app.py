from __future__ import annotations

import contextlib
import logging
import time
import typing as t

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import Route

from ttlstore.monitoring.metrics import ttlstore_request_latency_seconds, ttlstore_requests_total
from ttlstore.storage import BackendError, CacheBackend

KEY_PATH_PARAM = "key"
BAD_REQUEST_RESPONSE = "Bad Request"
NOT_FOUND_RESPONSE = "Key Not Found"
INTERNAL_SERVER_ERROR_RESPONSE = "Internal Server Error"

_logger = logging.getLogger(__name__)


def create_app(backend: CacheBackend, *, check_health: bool = True, debug: bool = False) -> Starlette:
    """Expose ``backend`` over HTTP.

    Routes:
        GET  /{key}  -> 200 with the raw value, 404 on a miss
        POST /{key}  -> 201 once stored, 400 on an empty or undecodable body,
                        500 when the backend write fails

    The lifespan refuses to start when ``check_health`` is set and the backend
    does not answer, and closes the backend on shutdown.
    """

    async def get_key(request: Request) -> Response:
        key = request.path_params[KEY_PATH_PARAM]
        _logger.debug("Received GET key request: key=%s", key)
        started = time.perf_counter()
        value, found = await backend.get(key)
        ttlstore_request_latency_seconds.observe(time.perf_counter() - started, op="get")
        if not found:
            ttlstore_requests_total.inc(op="get", result="miss")
            _logger.debug("Cache miss: key=%s", key)
            return PlainTextResponse(NOT_FOUND_RESPONSE, status_code=404)
        ttlstore_requests_total.inc(op="get", result="hit")
        _logger.debug("Cache hit: key=%s", key)
        return PlainTextResponse(value, status_code=200)

    async def store_key(request: Request) -> Response:
        key = request.path_params[KEY_PATH_PARAM]
        _logger.debug("Received POST key request: key=%s", key)
        body = await request.body()
        try:
            value = body.decode("utf-8")
        except UnicodeDecodeError as exc:
            _logger.warning("Failed to read request body: key=%s error=%s", key, exc)
            ttlstore_requests_total.inc(op="set", result="bad_request")
            return PlainTextResponse(BAD_REQUEST_RESPONSE, status_code=400)
        if value == "":
            ttlstore_requests_total.inc(op="set", result="bad_request")
            return PlainTextResponse(BAD_REQUEST_RESPONSE, status_code=400)

        started = time.perf_counter()
        try:
            await backend.set(key, value)
        except BackendError:
            ttlstore_requests_total.inc(op="set", result="error")
            _logger.warning("Cache write failed: key=%s", key)
            return PlainTextResponse(INTERNAL_SERVER_ERROR_RESPONSE, status_code=500)
        finally:
            ttlstore_request_latency_seconds.observe(time.perf_counter() - started, op="set")
        ttlstore_requests_total.inc(op="set", result="stored")
        return Response(status_code=201)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> t.AsyncIterator[None]:
        if check_health and not await backend.is_healthy():
            _logger.error("Cache backend %s is not reachable", backend.name)
            await backend.close()
            raise BackendError(f"{backend.name} backend is not reachable")
        _logger.info("Cache backend ready: %s", backend.name)
        try:
            yield
        finally:
            _logger.info("Shutting down")
            await backend.close()

    routes = [
        Route(f"/{{{KEY_PATH_PARAM}}}", get_key, methods=["GET"]),
        Route(f"/{{{KEY_PATH_PARAM}}}", store_key, methods=["POST"]),
    ]
    return Starlette(debug=debug, routes=routes, lifespan=lifespan)
