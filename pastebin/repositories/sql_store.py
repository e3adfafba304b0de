from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, Optional

from sqlalchemy import Delete, Select, delete, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from pastebin.db import Base, create_db_engine
from pastebin.domain.models import PasteRecord, PasteRow
from pastebin.observability import get_correlation_id

from .paste_store import (
    PasteStore,
    StorageUnavailable,
    compute_store_ttl,
    decode_record,
    store_key,
)


logger = logging.getLogger(__name__)


class SqlPasteStore(PasteStore):
    """
    PasteStore backed by a relational table.

    SQL databases have no native TTL, so each row carries the epoch-ms time at
    which it counts as evicted. Reads skip such rows and
    :meth:`purge_expired` (driven by the expiry worker) removes them.

    Owns session lifecycle: one session per operation, committed on success,
    rolled back on error and always closed.
    """

    backend_name = "sql"

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        engine: Engine | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._session_factory = session_factory
        self._engine = engine

    @classmethod
    def from_url(
        cls,
        database_uri: str,
        *,
        echo: bool = False,
        create_tables: bool = False,
        **kwargs: Any,
    ) -> "SqlPasteStore":
        engine = create_db_engine(database_uri, echo=echo)
        if create_tables:
            Base.metadata.create_all(engine)
        session_factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)
        return cls(session_factory, engine=engine, **kwargs)

    @contextmanager
    def _session(self, operation: str, paste_id: str | None = None) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error(
                "SQL %s failed",
                operation,
                extra={
                    "event": "storage_error",
                    "paste_id": paste_id,
                    "store_backend": self.backend_name,
                    "error_type": type(exc).__name__,
                    "correlation_id": get_correlation_id(),
                },
            )
            raise StorageUnavailable(f"SQL {operation} failed: {exc}") from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def put(self, paste_id: str, record: PasteRecord) -> None:
        now = self._clock()
        ttl = compute_store_ttl(record, now, self.default_retention_seconds)
        row = PasteRow(
            key=store_key(paste_id),
            document=record.to_document(),
            store_expires_at=now + ttl * 1000,
        )
        with self._session("put", paste_id) as session:
            # One row holds both document and eviction time.
            session.merge(row)

    def get(self, paste_id: str) -> Optional[PasteRecord]:
        stmt: Select[tuple[str]] = select(PasteRow.document).where(
            PasteRow.key == store_key(paste_id),
            PasteRow.store_expires_at > self._clock(),
        )
        with self._session("get", paste_id) as session:
            raw = session.execute(stmt).scalar_one_or_none()

        if raw is None:
            return None
        return decode_record(paste_id, raw)

    def delete(self, paste_id: str) -> bool:
        stmt: Delete = delete(PasteRow).where(PasteRow.key == store_key(paste_id))
        with self._session("delete", paste_id) as session:
            result = session.execute(stmt)
        return bool(result.rowcount)

    def purge_expired(self) -> int:
        stmt: Delete = delete(PasteRow).where(
            PasteRow.store_expires_at <= self._clock()
        )
        with self._session("purge") as session:
            result = session.execute(stmt)
        return int(result.rowcount or 0)

    @property
    def needs_sweeping(self) -> bool:
        return True

    def ping(self) -> bool:
        try:
            with self._session("ping") as session:
                session.execute(text("SELECT 1"))
        except StorageUnavailable:
            return False
        return True

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
