from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Optional

from pydantic import ValidationError

from pastebin.config import SEVEN_DAYS_SECONDS
from pastebin.domain.lifecycle import now_ms
from pastebin.domain.models import PasteRecord


KEY_PREFIX = "paste:"


class StorageError(Exception):
    """Base class for paste storage failures."""


class StorageUnavailable(StorageError):
    """Raised when the backing store cannot be reached or fails a command."""


class CorruptPasteRecord(StorageError):
    """Raised when a stored document cannot be decoded into a PasteRecord."""


def store_key(paste_id: str) -> str:
    return f"{KEY_PREFIX}{paste_id}"


def compute_store_ttl(
    record: PasteRecord,
    now: int,
    default_retention_seconds: int = SEVEN_DAYS_SECONDS,
) -> int:
    """
    Store-level TTL in whole seconds for ``record`` written at ``now`` (ms).

    Pastes with an expiry live until that expiry, rounded up and never less
    than one second; pastes without one get the default retention window.
    """
    if record.expires_at is None:
        return default_retention_seconds
    return max(1, math.ceil((record.expires_at - now) / 1000))


def decode_record(paste_id: str, raw: str | bytes) -> PasteRecord:
    try:
        return PasteRecord.from_document(raw)
    except ValidationError as exc:
        raise CorruptPasteRecord(
            f"Stored document for paste {paste_id} is not a valid paste record."
        ) from exc


class PasteStore(ABC):
    """
    Key-value persistence for paste records.

    One document per paste id under ``paste:<id>``, evicted by the store once
    its TTL elapses. Communication failures raise :class:`StorageUnavailable`
    and are never reported as a missing record.
    """

    backend_name: str = "abstract"

    def __init__(
        self,
        *,
        default_retention_seconds: int = SEVEN_DAYS_SECONDS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.default_retention_seconds = default_retention_seconds
        self._clock = clock

    def ttl_for(self, record: PasteRecord) -> int:
        return compute_store_ttl(
            record,
            self._clock(),
            self.default_retention_seconds,
        )

    @abstractmethod
    def put(self, paste_id: str, record: PasteRecord) -> None:
        """Write ``record`` and arm its TTL in one atomic operation."""

    @abstractmethod
    def get(self, paste_id: str) -> Optional[PasteRecord]:
        """Return the record, or ``None`` if it never existed or was evicted."""

    @abstractmethod
    def delete(self, paste_id: str) -> bool:
        """Remove the record now. Returns ``True`` if something was removed."""

    @abstractmethod
    def ping(self) -> bool:
        """Return ``True`` if the store answers."""

    def purge_expired(self) -> int:
        """Drop records whose TTL has elapsed. Stores with native TTL need not."""
        return 0

    @property
    def needs_sweeping(self) -> bool:
        return False

    def close(self) -> None:
        """Release the underlying client or connection pool."""
