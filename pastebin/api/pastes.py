from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Optional

from flask import Blueprint, current_app, request
from pydantic import ValidationError

from pastebin.api.schemas import (
    HealthResponse,
    PasteCreateRequest,
    PasteCreatedResponse,
    PasteViewResponse,
    describe_validation_error,
)
from pastebin.observability import get_correlation_id
from pastebin.repositories.paste_store import StorageError
from pastebin.services.helpers import build_paste_url, parse_test_now
from pastebin.services.paste_service import (
    InvalidPasteParameters,
    PasteNotFoundError,
    PasteService,
)
from pastebin.store import get_store

api_bp = Blueprint("api", __name__)

logger = logging.getLogger(__name__)

TEST_NOW_HEADER = "X-Test-Now-Ms"


def paste_service() -> PasteService:
    return PasteService(
        store=get_store(),
        id_bytes=current_app.config.get("PASTE_ID_BYTES", 6),
    )


def request_now() -> Optional[int]:
    """Clock override from ``X-Test-Now-Ms``, honoured only in test mode."""
    if not current_app.config.get("TEST_MODE", False):
        return None
    return parse_test_now(request.headers.get(TEST_NOW_HEADER))


def public_base_url() -> str:
    return current_app.config.get("PUBLIC_BASE_URL") or request.host_url


def storage_failure(exc: StorageError, operation: str) -> tuple[dict, int]:
    logger.exception(
        "Storage failure during %s",
        operation,
        extra={
            "event": "storage_error",
            "error_type": type(exc).__name__,
            "correlation_id": get_correlation_id(),
        },
    )
    return {"error": "Storage unavailable"}, HTTPStatus.INTERNAL_SERVER_ERROR


@api_bp.route("/health", methods=["GET"])
def health() -> tuple[dict, int]:
    """Health check that also probes the paste store."""

    if get_store().ping():
        return HealthResponse().model_dump(), HTTPStatus.OK
    body = HealthResponse(status="degraded", store="unavailable").model_dump()
    return body, HTTPStatus.SERVICE_UNAVAILABLE


@api_bp.route("/pastes", methods=["POST"])
def create_paste() -> tuple[dict, int]:
    """
    Create a new paste.

    Validation is handled by Pydantic; business rules by the service layer.
    """
    try:
        payload = PasteCreateRequest.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        details = describe_validation_error(exc)
        return {"error": next(iter(details.values())), "details": details}, HTTPStatus.BAD_REQUEST

    try:
        dto = paste_service().create_paste(
            content=payload.content,
            ttl_seconds=payload.ttl_seconds,
            max_views=payload.max_views,
        )
    except InvalidPasteParameters as exc:
        return {"error": str(exc)}, HTTPStatus.BAD_REQUEST
    except StorageError as exc:
        return storage_failure(exc, "create")

    body = PasteCreatedResponse(
        id=dto["id"],
        url=build_paste_url(public_base_url(), dto["id"]),
    )
    return body.model_dump(), HTTPStatus.CREATED


@api_bp.route("/pastes/<paste_id>", methods=["GET"])
def view_paste(paste_id: str) -> tuple[dict, int]:
    try:
        dto = paste_service().retrieve_paste(paste_id, now=request_now())
    except PasteNotFoundError as exc:
        return {"error": str(exc)}, HTTPStatus.NOT_FOUND
    except StorageError as exc:
        return storage_failure(exc, "retrieve")

    return PasteViewResponse(**dto).model_dump(), HTTPStatus.OK


@api_bp.route("/pastes/<paste_id>", methods=["DELETE"])
def delete_paste(paste_id: str) -> tuple[dict, int]:
    """Remove a paste immediately instead of waiting for its TTL."""
    try:
        dto = paste_service().delete_paste(paste_id)
    except PasteNotFoundError as exc:
        return {"error": str(exc)}, HTTPStatus.NOT_FOUND
    except StorageError as exc:
        return storage_failure(exc, "delete")

    return dto, HTTPStatus.OK
