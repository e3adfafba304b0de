from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, NoReturn, Optional

from pastebin.domain.lifecycle import (
    Visibility,
    compute_expiry,
    consume_view,
    evaluate_visibility,
    now_ms,
)
from pastebin.domain.models import MAX_TTL_SECONDS, PasteRecord, is_storable_text
from pastebin.observability import get_correlation_id
from pastebin.repositories.paste_store import PasteStore

from .helpers import MIN_ID_BYTES, generate_paste_id, is_valid_paste_id


logger = logging.getLogger(__name__)


def _view_to_dto(record: PasteRecord) -> dict[str, Any]:
    """Convert a PasteRecord to the public view DTO."""
    return {
        "content": record.content,
        "remaining_views": record.remaining_views,
        "expires_at": record.expires_at,
    }


class PasteError(Exception):
    """Base class for paste-related errors."""


class InvalidPasteParameters(PasteError):
    """Raised when creating a paste with invalid parameters."""


class PasteNotFoundError(PasteError):
    """Raised when a paste is absent, expired or out of views."""

    def __init__(self, paste_id: str) -> None:
        super().__init__("Paste not found")
        self.paste_id = paste_id


def _is_positive_int(value: object, upper: Optional[int] = None) -> bool:
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        return False
    return upper is None or value <= upper


@dataclass
class PasteService:
    """
    Application service coordinating paste use cases over a PasteStore.

    Retrieval reads the record, checks it against the lifecycle rules and,
    for view-limited pastes, writes back the decremented record. The read and
    the write are separate store calls; two readers racing for the last view
    may both succeed. That best-effort limit is accepted behaviour.
    """

    store: PasteStore
    id_bytes: int = MIN_ID_BYTES
    clock: Callable[[], int] = field(default=now_ms)

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------
    def create_paste(
        self,
        *,
        content: str,
        ttl_seconds: Optional[int] = None,
        max_views: Optional[int] = None,
    ) -> dict[str, Any]:
        """
        Create and persist a new paste, returning ``{id, expires_at, remaining_views}``.

        - ``content`` must be a string that is not blank after trimming
        - ``ttl_seconds`` and ``max_views``, when given, must be integers >= 1
        - ``ttl_seconds`` is capped at ``MAX_TTL_SECONDS`` (100 years)
        """
        problems: dict[str, str] = {}
        if (
            not isinstance(content, str)
            or not content.strip()
            or not is_storable_text(content)
        ):
            problems["content"] = "content is required and must be a non-empty string"
        if ttl_seconds is not None and not _is_positive_int(ttl_seconds, MAX_TTL_SECONDS):
            problems["ttl_seconds"] = "ttl_seconds must be an integer >= 1"
        if max_views is not None and not _is_positive_int(max_views):
            problems["max_views"] = "max_views must be an integer >= 1"

        if problems:
            logger.warning(
                "Invalid parameters when creating paste",
                extra={
                    "event": "paste_create_invalid_parameters",
                    "correlation_id": get_correlation_id(),
                },
            )
            raise InvalidPasteParameters("; ".join(problems.values()))

        paste_id = generate_paste_id(self.id_bytes)
        record = PasteRecord(
            content=content,
            expires_at=compute_expiry(self.clock(), ttl_seconds),
            remaining_views=max_views,
        )
        self.store.put(paste_id, record)

        logger.info(
            "Paste created",
            extra={
                "event": "paste_created",
                "paste_id": paste_id,
                "correlation_id": get_correlation_id(),
            },
        )
        return {
            "id": paste_id,
            "expires_at": record.expires_at,
            "remaining_views": record.remaining_views,
        }

    # -------------------------------------------------------------------------
    # Retrieval / viewing
    # -------------------------------------------------------------------------
    def retrieve_paste(
        self,
        paste_id: str,
        *,
        now: Optional[int] = None,
    ) -> dict[str, Any]:
        """
        Retrieve a paste for viewing, consuming one view if it is limited.

        ``now`` overrides the clock for the visibility check only. Absent,
        expired and exhausted pastes all raise ``PasteNotFoundError``.
        """
        logger.info(
            "Paste access attempt",
            extra={
                "event": "paste_access_attempt",
                "paste_id": paste_id,
                "correlation_id": get_correlation_id(),
            },
        )

        if not is_valid_paste_id(paste_id):
            self._deny(paste_id, "MALFORMED_ID")

        record = self.store.get(paste_id)
        if record is None:
            self._deny(paste_id, "ABSENT")

        visibility = evaluate_visibility(
            record,
            self.clock() if now is None else now,
        )
        if visibility is not Visibility.VISIBLE:
            self._deny(paste_id, visibility.value)

        if record.remaining_views is not None:
            record = consume_view(record)
            self.store.put(paste_id, record)

        logger.info(
            "Paste access successful",
            extra={
                "event": "paste_access_success",
                "paste_id": paste_id,
                "correlation_id": get_correlation_id(),
            },
        )
        return _view_to_dto(record)

    def _deny(self, paste_id: str, reason: str) -> NoReturn:
        logger.info(
            "Paste access denied",
            extra={
                "event": "paste_access_denied",
                "paste_id": paste_id,
                "visibility": reason,
                "correlation_id": get_correlation_id(),
            },
        )
        raise PasteNotFoundError(paste_id)

    # -------------------------------------------------------------------------
    # Deletion
    # -------------------------------------------------------------------------
    def delete_paste(self, paste_id: str) -> dict[str, Any]:
        """Remove a paste from the store immediately."""
        if not is_valid_paste_id(paste_id) or not self.store.delete(paste_id):
            raise PasteNotFoundError(paste_id)

        logger.info(
            "Paste deleted",
            extra={
                "event": "paste_deleted",
                "paste_id": paste_id,
                "correlation_id": get_correlation_id(),
            },
        )
        return {"id": paste_id, "deleted": True}
