from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, StrictStr, ValidationError, field_validator

from pastebin.domain.models import MAX_TTL_SECONDS, is_storable_text


FIELD_MESSAGES: dict[str, str] = {
    "content": "content is required and must be a non-empty string",
    "ttl_seconds": "ttl_seconds must be an integer >= 1",
    "max_views": "max_views must be an integer >= 1",
}


class PasteCreateRequest(BaseModel):
    content: StrictStr = Field(..., description="Paste content")
    ttl_seconds: Optional[int] = Field(
        default=None,
        ge=1,
        le=MAX_TTL_SECONDS,
        description="Optional lifetime in seconds (>= 1)",
    )
    max_views: Optional[int] = Field(
        default=None,
        ge=1,
        description="Optional maximum number of views (>= 1)",
    )

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        if not value.strip() or not is_storable_text(value):
            raise ValueError(FIELD_MESSAGES["content"])
        return value

    @field_validator("ttl_seconds", "max_views", mode="before")
    @classmethod
    def _reject_booleans(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("must be an integer, not a boolean")
        return value


class PasteCreatedResponse(BaseModel):
    id: str
    url: str


class PasteViewResponse(BaseModel):
    content: str
    remaining_views: Optional[int]
    expires_at: Optional[int]


class HealthResponse(BaseModel):
    status: str = "ok"
    store: str = "ok"


def describe_validation_error(exc: ValidationError) -> dict[str, str]:
    """Map pydantic errors to one human-readable message per request field."""

    details: dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        field_name = str(loc[0]) if loc else "body"
        details.setdefault(
            field_name,
            FIELD_MESSAGES.get(field_name, "request body must be a JSON object"),
        )
    return details
