from __future__ import annotations

import atexit
import logging

from flask import Flask, current_app

from .repositories.paste_store import PasteStore
from .repositories.redis_store import RedisPasteStore
from .repositories.sql_store import SqlPasteStore


logger = logging.getLogger(__name__)

EXTENSION_KEY = "paste_store"


def build_store(config) -> PasteStore:
    """Construct the configured PasteStore from a Flask config mapping."""

    backend = (config.get("PASTE_STORE_BACKEND") or "redis").lower()
    retention = int(config["DEFAULT_RETENTION_SECONDS"])

    if backend == "redis":
        return RedisPasteStore.from_url(
            config["REDIS_URL"],
            socket_timeout=float(config.get("REDIS_SOCKET_TIMEOUT", 5.0)),
            default_retention_seconds=retention,
        )
    if backend == "sql":
        return SqlPasteStore.from_url(
            config["SQLALCHEMY_DATABASE_URI"],
            echo=config.get("SQLALCHEMY_ECHO", False),
            create_tables=config.get("SQLALCHEMY_CREATE_TABLES", False),
            default_retention_seconds=retention,
        )
    raise RuntimeError(
        f"Unknown PASTE_STORE_BACKEND {backend!r}. Expected 'redis' or 'sql'."
    )


def init_store(app: Flask, store: PasteStore | None = None) -> PasteStore:
    """
    Create the process-wide paste store and attach it to ``app``.

    The store is built once here and shared read-only by every request. It is
    closed by :func:`close_store` or, failing that, at interpreter exit.
    """

    if store is None:
        store = build_store(app.config)
    app.extensions[EXTENSION_KEY] = store
    atexit.register(store.close)

    logger.info(
        "Paste store initialized",
        extra={"event": "store_initialized", "store_backend": store.backend_name},
    )
    return store


def get_store() -> PasteStore:
    """Return the paste store of the current application."""

    try:
        return current_app.extensions[EXTENSION_KEY]
    except KeyError:
        raise RuntimeError("Paste store is not initialized. Call init_store(app) first.") from None


def close_store(app: Flask) -> None:
    """Close and detach the application's paste store, if any."""

    store = app.extensions.pop(EXTENSION_KEY, None)
    if store is None:
        return
    atexit.unregister(store.close)
    store.close()
