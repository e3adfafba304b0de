from __future__ import annotations

from typing import Generator

import pytest
from flask import Flask
from flask.testing import FlaskClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from pastebin import create_app
from pastebin.db import Base, create_db_engine
from pastebin.repositories.sql_store import SqlPasteStore
from pastebin.services.paste_service import PasteService
from pastebin.store import close_store


# Arbitrary fixed epoch, in milliseconds.
T0 = 1_700_000_000_000


class FakeClock:
    """Manually driven epoch-millisecond clock."""

    def __init__(self, now: int = T0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, *, seconds: float = 0, ms: int = 0) -> None:
        self.now += int(seconds * 1000) + ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="function")
def engine() -> Generator[Engine, None, None]:
    """
    Create a fresh in-memory SQLite engine for each test function.

    This keeps tests focused on paste behavior while using a real database
    for store operations.
    """

    engine = create_db_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def sql_store(session_factory: sessionmaker, clock: FakeClock) -> SqlPasteStore:
    return SqlPasteStore(session_factory, clock=clock)


@pytest.fixture
def paste_service(sql_store: SqlPasteStore, clock: FakeClock) -> PasteService:
    """Service sharing the fake clock with its store."""
    return PasteService(store=sql_store, clock=clock)


@pytest.fixture
def app() -> Generator[Flask, None, None]:
    app = create_app("testing")
    try:
        yield app
    finally:
        close_store(app)


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    return app.test_client()
