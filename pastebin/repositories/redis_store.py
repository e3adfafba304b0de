"""Redis implementation of PasteStore.

Redis evicts keys on its own once ``EX`` elapses, so no sweeping is needed.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import redis
from redis.exceptions import RedisError

from pastebin.domain.models import PasteRecord
from pastebin.observability import get_correlation_id

from .paste_store import PasteStore, StorageUnavailable, decode_record, store_key


logger = logging.getLogger(__name__)


class RedisPasteStore(PasteStore):
    """PasteStore backed by a single process-wide Redis client."""

    backend_name = "redis"

    def __init__(self, client: redis.Redis, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._client = client

    @classmethod
    def from_url(
        cls,
        redis_url: str,
        *,
        socket_timeout: float = 5.0,
        **kwargs: Any,
    ) -> "RedisPasteStore":
        client = redis.Redis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        return cls(client, **kwargs)

    def _fail(self, operation: str, paste_id: str | None, exc: RedisError) -> StorageUnavailable:
        logger.error(
            "Redis %s failed",
            operation,
            extra={
                "event": "storage_error",
                "paste_id": paste_id,
                "store_backend": self.backend_name,
                "error_type": type(exc).__name__,
                "correlation_id": get_correlation_id(),
            },
        )
        return StorageUnavailable(f"Redis {operation} failed: {exc}")

    def put(self, paste_id: str, record: PasteRecord) -> None:
        ttl = self.ttl_for(record)
        try:
            # SET with EX writes the value and arms its TTL together.
            self._client.set(store_key(paste_id), record.to_document(), ex=ttl)
        except RedisError as exc:
            raise self._fail("put", paste_id, exc) from exc

    def get(self, paste_id: str) -> Optional[PasteRecord]:
        try:
            raw = self._client.get(store_key(paste_id))
        except RedisError as exc:
            raise self._fail("get", paste_id, exc) from exc

        if raw is None:
            return None
        return decode_record(paste_id, raw)

    def delete(self, paste_id: str) -> bool:
        try:
            removed = self._client.delete(store_key(paste_id))
        except RedisError as exc:
            raise self._fail("delete", paste_id, exc) from exc
        return bool(removed)

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except RedisError:
            return False

    def close(self) -> None:
        self._client.close()
