from __future__ import annotations

import enum
import time
from typing import Optional

from .models import PasteRecord


class Visibility(str, enum.Enum):
    VISIBLE = "VISIBLE"
    EXPIRED = "EXPIRED"
    VIEW_LIMIT_EXCEEDED = "VIEW_LIMIT_EXCEEDED"


def now_ms() -> int:
    """Current system time in epoch milliseconds."""
    return int(time.time() * 1000)


def evaluate_visibility(record: PasteRecord, now: int) -> Visibility:
    """
    Decide whether ``record`` may be shown at time ``now`` (epoch ms).

    - ``EXPIRED`` if ``expires_at`` is set and ``now`` is strictly past it.
    - ``VIEW_LIMIT_EXCEEDED`` if the view counter is set and at zero.
    - ``VISIBLE`` otherwise.

    Both non-visible outcomes mean "not found" to the outside world; the
    distinction exists for logging only.
    """
    if record.expires_at is not None and now > record.expires_at:
        return Visibility.EXPIRED

    if record.remaining_views is not None and record.remaining_views <= 0:
        return Visibility.VIEW_LIMIT_EXCEEDED

    return Visibility.VISIBLE


def consume_view(record: PasteRecord) -> PasteRecord:
    """
    Return the record as it should look after one successful view.

    Unlimited pastes come back unchanged. Call this once per retrieval, after
    :func:`evaluate_visibility` accepted the pre-decrement record.
    """
    if record.remaining_views is None:
        return record
    return record.model_copy(
        update={"remaining_views": max(0, record.remaining_views - 1)}
    )


def compute_expiry(now: int, ttl_seconds: Optional[int]) -> Optional[int]:
    """Absolute expiry in epoch ms, or ``None`` when no TTL was requested."""
    if ttl_seconds is None:
        return None
    return now + ttl_seconds * 1000
