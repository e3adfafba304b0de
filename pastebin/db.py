from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool


Base = declarative_base()


def create_db_engine(database_uri: str, *, echo: bool = False) -> Engine:
    """
    Build a SQLAlchemy engine for the given URI.

    In-memory SQLite databases only exist per connection, so they are pinned
    to a single shared connection that request threads can use.
    """
    if not database_uri:
        raise RuntimeError("SQLALCHEMY_DATABASE_URI is not configured.")

    url = make_url(database_uri)
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        return create_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

    return create_engine(url, echo=echo, pool_pre_ping=True)
