from __future__ import annotations

import pytest
from pydantic import ValidationError

from pastebin.domain.lifecycle import (
    Visibility,
    compute_expiry,
    consume_view,
    evaluate_visibility,
)
from pastebin.domain.models import PasteRecord


NOW = 1_700_000_000_000


# ---------------------------------------------------------------------------
# Visibility
# ---------------------------------------------------------------------------


def test_unlimited_paste_is_visible() -> None:
    record = PasteRecord(content="hi")
    assert evaluate_visibility(record, NOW) is Visibility.VISIBLE


def test_expiry_boundary_is_exclusive() -> None:
    record = PasteRecord(content="hi", expires_at=NOW)

    assert evaluate_visibility(record, NOW - 1) is Visibility.VISIBLE
    assert evaluate_visibility(record, NOW) is Visibility.VISIBLE
    assert evaluate_visibility(record, NOW + 1) is Visibility.EXPIRED


def test_zero_remaining_views_is_view_limit_exceeded() -> None:
    assert (
        evaluate_visibility(PasteRecord(content="hi", remaining_views=0), NOW)
        is Visibility.VIEW_LIMIT_EXCEEDED
    )
    assert (
        evaluate_visibility(PasteRecord(content="hi", remaining_views=1), NOW)
        is Visibility.VISIBLE
    )


def test_expiry_is_checked_before_view_limit() -> None:
    record = PasteRecord(content="hi", expires_at=NOW - 1, remaining_views=0)
    assert evaluate_visibility(record, NOW) is Visibility.EXPIRED


# ---------------------------------------------------------------------------
# View consumption
# ---------------------------------------------------------------------------


def test_consume_view_leaves_unlimited_record_alone() -> None:
    record = PasteRecord(content="hi", expires_at=NOW)
    assert consume_view(record) is record


def test_consume_view_decrements_copy_only() -> None:
    record = PasteRecord(content="hi", expires_at=NOW, remaining_views=3)

    updated = consume_view(record)

    assert updated.remaining_views == 2
    assert updated.content == "hi"
    assert updated.expires_at == NOW
    assert record.remaining_views == 3


def test_consume_view_clamps_at_zero() -> None:
    record = PasteRecord(content="hi", remaining_views=0)
    assert consume_view(record).remaining_views == 0


def test_views_run_down_to_exactly_zero() -> None:
    record = PasteRecord(content="hi", remaining_views=3)
    seen = []
    while evaluate_visibility(record, NOW) is Visibility.VISIBLE:
        record = consume_view(record)
        seen.append(record.remaining_views)

    assert seen == [2, 1, 0]


# ---------------------------------------------------------------------------
# Expiry computation
# ---------------------------------------------------------------------------


def test_compute_expiry() -> None:
    assert compute_expiry(NOW, None) is None
    assert compute_expiry(NOW, 10) == NOW + 10_000


# ---------------------------------------------------------------------------
# Record invariants and document shape
# ---------------------------------------------------------------------------


def test_record_content_is_immutable() -> None:
    record = PasteRecord(content="immutable content")
    with pytest.raises(ValidationError):
        record.content = "new content"  # type: ignore[misc]


def test_negative_remaining_views_rejected() -> None:
    with pytest.raises(ValidationError):
        PasteRecord(content="hi", remaining_views=-1)


def test_document_uses_camel_case_keys() -> None:
    record = PasteRecord(content="hi", expires_at=NOW, remaining_views=2)

    assert record.to_document() == (
        f'{{"content":"hi","expiresAt":{NOW},"remainingViews":2}}'
    )
    assert PasteRecord.from_document(
        '{"content": "x", "expiresAt": null, "remainingViews": null}'
    ) == PasteRecord(content="x")
