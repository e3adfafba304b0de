from __future__ import annotations

import logging
import threading

from pastebin.repositories.paste_store import PasteStore, StorageUnavailable


logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 10.0

_worker_thread: threading.Thread | None = None
_stop_event = threading.Event()
_worker_lock = threading.Lock()


def purge_once(store: PasteStore) -> int:
    """Run a single sweep, returning how many expired pastes were removed."""

    try:
        removed = store.purge_expired()
    except StorageUnavailable:
        logger.warning(
            "Expiry worker: store unavailable; skipping cycle",
            extra={
                "event": "expiry_worker_store_unavailable",
                "store_backend": store.backend_name,
                "correlation_id": "expiry-worker",
            },
        )
        return 0

    if removed:
        logger.info(
            "Expiry worker: purged %d expired pastes",
            removed,
            extra={
                "event": "expiry_worker_purge",
                "store_backend": store.backend_name,
                "correlation_id": "expiry-worker",
            },
        )
    return removed


def _expiry_loop(store: PasteStore, interval: float, stop: threading.Event) -> None:
    """Background loop that periodically purges expired pastes."""

    while not stop.is_set():
        try:
            purge_once(store)
        except Exception:  # pragma: no cover - keep the sweeper alive
            logger.exception(
                "Error in expiry worker loop",
                extra={
                    "event": "expiry_worker_error",
                    "correlation_id": "expiry-worker",
                },
            )
        stop.wait(interval)


def start_expiry_worker(
    store: PasteStore,
    interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
) -> bool:
    """
    Start the expiry worker in a background thread.

    This function is idempotent and will only start a single worker thread.
    Returns ``True`` if a thread was started by this call.
    """

    global _worker_thread
    with _worker_lock:
        if _worker_thread is not None and _worker_thread.is_alive():
            return False

        _stop_event.clear()
        _worker_thread = threading.Thread(
            target=_expiry_loop,
            args=(store, interval, _stop_event),
            name="expiry-worker",
            daemon=True,
        )
        _worker_thread.start()
        return True


def stop_expiry_worker(timeout: float | None = 5.0) -> None:
    """Signal the worker to stop and wait for it to exit."""

    global _worker_thread
    with _worker_lock:
        thread = _worker_thread
        _worker_thread = None
        _stop_event.set()

    if thread is not None:
        thread.join(timeout)
