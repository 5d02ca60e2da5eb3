"""
MemKV HTTP API

FastAPI application exposing the string and list stores:
- /strings               set / get / update / delete string keys
- /lists/strings         set / get / update / delete string lists
- /lists/strings/push    append to a list tail
- /lists/strings/pop     take from a list head
- /health, /metrics      observability

Every route except /health requires a bearer token. Store routes are plain
functions so FastAPI runs them on its threadpool; the stores are
synchronous and lock-guarded.
"""

import logging
import time
from contextlib import asynccontextmanager, contextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from memkv.auth import BearerAuthMiddleware
from memkv.config import MemKVConfig
from memkv.errors import (
    AlreadyExistsError,
    EmptyListError,
    ExpiredError,
    InvalidTTLError,
    NotFoundError,
    StoreError,
)
from memkv.list_store import ListStore
from memkv.metrics import MetricsCollector, StructuredLogger
from memkv.models import (
    HealthResponse,
    ListResponse,
    PopResponse,
    SetListRequest,
    SetStringRequest,
    StringResponse,
    UpdateListRequest,
    UpdateStringRequest,
)
from memkv.storage_engine import Entry
from memkv.string_store import StringStore

VERSION = "1.0.0"

logger = logging.getLogger(__name__)

# Store error kind -> (HTTP status, client-facing message)
ERROR_RESPONSES = {
    AlreadyExistsError: (409, "key already exists"),
    NotFoundError: (404, "key not found"),
    ExpiredError: (404, "key not found"),
    EmptyListError: (409, "list is empty"),
    InvalidTTLError: (400, "invalid ttl"),
}


def configure_logging(config: MemKVConfig) -> None:
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=config.log_level.value,
    )


def _require_key(key: str) -> None:
    if not key:
        raise HTTPException(status_code=400, detail="key cannot be empty")


def _require_value(value: str) -> None:
    if not value:
        raise HTTPException(status_code=400, detail="value cannot be empty")


def _expires_at(entry: Entry) -> Optional[str]:
    if entry.expires_at is None:
        return None
    return entry.expires_at.isoformat()


def create_app(
    config: Optional[MemKVConfig] = None,
    string_store: Optional[StringStore] = None,
    list_store: Optional[ListStore] = None,
) -> FastAPI:
    """
    Build the API around explicitly constructed stores.

    Args:
        config: Configuration; loaded from the environment when omitted
        string_store: Store for /strings; a fresh one when omitted
        list_store: Store for /lists/strings; a fresh one when omitted

    Raises:
        ValueError: configuration is invalid
    """
    config = config or MemKVConfig.from_env()
    configure_logging(config)

    try:
        config.validate()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        raise

    string_store = string_store if string_store is not None else StringStore()
    list_store = list_store if list_store is not None else ListStore()
    metrics_collector = MetricsCollector()
    logger_structured = StructuredLogger("memkv.commands")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("MemKV server starting")
        logger_structured.log_startup(config.to_dict())

        yield

        logger_structured.log_shutdown(
            "shutdown",
            {"strings": string_store.info(), "lists": list_store.info()},
        )
        logger.info("Shutdown complete")

    app = FastAPI(
        title="MemKV Server",
        description="In-memory string and list store with TTL expiry",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.string_store = string_store
    app.state.list_store = list_store
    app.state.metrics = metrics_collector

    app.add_middleware(BearerAuthMiddleware, api_key=config.api_key)

    # ========================================================================
    # Error mapping
    # ========================================================================

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        status_code, message = ERROR_RESPONSES.get(type(exc), (500, str(exc)))
        return JSONResponse({"detail": message}, status_code=status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.debug(f"Rejected request body on {request.url.path}: {exc.errors()}")
        return JSONResponse({"detail": "invalid request body"}, status_code=400)

    @contextmanager
    def track(command: str, key: str, details: Optional[Dict[str, Any]] = None):
        """Time a store call, record it, and log its outcome."""
        start_time = time.monotonic()
        status = "success"
        try:
            yield
        except Exception as e:
            status = type(e).__name__
            raise
        finally:
            latency_ms = (time.monotonic() - start_time) * 1000
            if config.metrics_enabled:
                metrics_collector.record_command(command, latency_ms, error=status != "success")
            logger_structured.log_command(command, key, status, latency_ms, details)

    # ========================================================================
    # Endpoints - Health & Metrics
    # ========================================================================

    @app.get("/health", response_model=HealthResponse)
    def health():
        """Health check endpoint (no authentication)."""
        return HealthResponse(
            status="healthy",
            version=VERSION,
            string_keys=string_store.info()["keys"],
            list_keys=list_store.info()["keys"],
        )

    @app.get("/metrics")
    def metrics():
        """Prometheus format metrics."""
        if not config.metrics_enabled:
            raise HTTPException(status_code=404, detail="metrics disabled")
        return PlainTextResponse(metrics_collector.export_prometheus([string_store, list_store]))

    @app.get("/metrics/json")
    def metrics_json():
        """Metrics as JSON."""
        if not config.metrics_enabled:
            raise HTTPException(status_code=404, detail="metrics disabled")
        return metrics_collector.export_json([string_store, list_store])

    # ========================================================================
    # Endpoints - Strings
    # ========================================================================

    @app.post("/strings", status_code=204)
    def set_string(request: SetStringRequest):
        """Create a string key. Fails with 409 if the key exists."""
        _require_key(request.key)
        _require_value(request.value)

        with track("STRINGS_SET", request.key, {"ttl": request.ttl}):
            string_store.set(request.key, request.value, ttl=request.ttl)
        return Response(status_code=204)

    @app.get("/strings", response_model=StringResponse, response_model_exclude_none=True)
    def get_string(key: str = Query("", description="Key to read")):
        """Read a string key."""
        _require_key(key)

        with track("STRINGS_GET", key):
            entry = string_store.get(key)
        return StringResponse(value=entry.value, expires_at=_expires_at(entry))

    @app.put("/strings", status_code=204)
    def update_string(request: UpdateStringRequest):
        """Replace a string value, keeping its expiry."""
        _require_key(request.key)
        _require_value(request.value)

        with track("STRINGS_UPDATE", request.key):
            string_store.update(request.key, request.value)
        return Response(status_code=204)

    @app.delete("/strings", status_code=204)
    def delete_string(key: str = Query("", description="Key to delete")):
        """Delete a string key."""
        _require_key(key)

        with track("STRINGS_DELETE", key):
            string_store.remove(key)
        return Response(status_code=204)

    # ========================================================================
    # Endpoints - String lists
    # ========================================================================

    @app.post("/lists/strings", status_code=204)
    def set_list(request: SetListRequest):
        """Create a list key. An empty list is allowed."""
        _require_key(request.key)

        with track("LISTS_SET", request.key, {"ttl": request.ttl}):
            list_store.set(request.key, request.list, ttl=request.ttl)
        return Response(status_code=204)

    @app.get("/lists/strings", response_model=ListResponse, response_model_exclude_none=True)
    def get_list(key: str = Query("", description="Key to read")):
        """Read a whole list, head first."""
        _require_key(key)

        with track("LISTS_GET", key):
            entry = list_store.get(key)
        return ListResponse(list=entry.value, expires_at=_expires_at(entry))

    @app.put("/lists/strings", status_code=204)
    def update_list(request: UpdateListRequest):
        """Replace a list, keeping its expiry."""
        _require_key(request.key)

        with track("LISTS_UPDATE", request.key):
            list_store.update(request.key, request.list)
        return Response(status_code=204)

    @app.delete("/lists/strings", status_code=204)
    def delete_list(key: str = Query("", description="Key to delete")):
        """Delete a list key."""
        _require_key(key)

        with track("LISTS_DELETE", key):
            list_store.remove(key)
        return Response(status_code=204)

    @app.post("/lists/strings/push", status_code=204)
    def push(
        key: str = Query("", description="Existing list key"),
        value: str = Query("", description="Item to append"),
    ):
        """Append an item to the tail of an existing list."""
        _require_key(key)
        _require_value(value)

        with track("LISTS_PUSH", key):
            list_store.push(key, value)
        return Response(status_code=204)

    @app.post("/lists/strings/pop", response_model=PopResponse)
    def pop(key: str = Query("", description="Existing list key")):
        """Remove and return the head of a list."""
        _require_key(key)

        with track("LISTS_POP", key):
            value = list_store.pop(key)
        return PopResponse(value=value)

    return app
