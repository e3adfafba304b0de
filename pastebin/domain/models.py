from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import BigInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from pastebin.db import Base


STORE_KEY_MAX_LENGTH = 64

# Keeps epoch-ms expiry times well inside BIGINT and Redis EX limits.
MAX_TTL_SECONDS = 100 * 365 * 24 * 60 * 60


def is_storable_text(value: str) -> bool:
    """False for text that cannot be UTF-8 encoded, e.g. lone surrogates."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


class PasteRecord(BaseModel):
    """
    A stored paste: its content plus expiry and view-limit metadata.

    Instances are frozen; ``content`` never changes after creation and the
    only mutation is a fresh copy with a decremented ``remaining_views``.
    The persisted document uses camelCase keys::

        {"content": "...", "expiresAt": 1700000000000, "remainingViews": 3}
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    content: str
    expires_at: Optional[int] = Field(
        default=None,
        alias="expiresAt",
        description="Epoch milliseconds after which the paste is invisible",
    )
    remaining_views: Optional[int] = Field(
        default=None,
        alias="remainingViews",
        ge=0,
        description="Views left before the paste becomes inaccessible",
    )

    def to_document(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_document(cls, raw: str | bytes) -> "PasteRecord":
        return cls.model_validate_json(raw)


class PasteRow(Base):
    """Paste document row used by the SQL-backed store."""

    __tablename__ = "pastes"

    key: Mapped[str] = mapped_column(String(STORE_KEY_MAX_LENGTH), primary_key=True)
    document: Mapped[str] = mapped_column(Text, nullable=False)
    # Epoch milliseconds at which the store evicts the row.
    store_expires_at: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        index=True,
    )
