from __future__ import annotations

import os
from logging.config import fileConfig

from alembic import context

from pastebin.config import get_config
from pastebin.db import Base, create_db_engine
# Import models so that Base.metadata holds the pastes table
from pastebin.domain import models as _models  # noqa: F401


config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def database_uri() -> str:
    """
    Resolve the database the SQL paste store uses for ``APP_ENV``.

    ``alembic -x db_url=...`` wins over the application config, which already
    honours ``DATABASE_URL``.
    """
    override = context.get_x_argument(as_dictionary=True).get("db_url")
    if override:
        return override
    return get_config(os.getenv("APP_ENV", "development")).SQLALCHEMY_DATABASE_URI


def _is_sqlite(uri: str) -> bool:
    return uri.startswith("sqlite")


def run_migrations_offline() -> None:
    """Emit SQL for the pastes schema without connecting."""
    uri = database_uri()
    context.configure(
        url=uri,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        render_as_batch=_is_sqlite(uri),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations using the same engine builder as the paste store."""
    uri = database_uri()
    engine = create_db_engine(uri)
    try:
        with engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                compare_type=True,
                render_as_batch=_is_sqlite(uri),
            )

            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
