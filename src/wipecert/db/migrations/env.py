"""Alembic environment for the certificates schema.

Migrations always run on a synchronous driver: the URL the service uses
(``sqlite+aiosqlite``, ``postgresql+psycopg``) is mapped to its sync
equivalent before connecting. ``DATABASE_URL`` overrides the service
setting, which lets operators point Alembic at another database.
"""

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from wipecert.core.config import DatabaseSettings
from wipecert.db.models import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

SYNC_DRIVERS = {
    "sqlite+aiosqlite": "sqlite",
    "postgresql+asyncpg": "postgresql+psycopg",
}


def to_sync_url(url: str) -> str:
    scheme, sep, rest = url.partition("://")
    return f"{SYNC_DRIVERS.get(scheme, scheme)}{sep}{rest}"


def get_url() -> str:
    return to_sync_url(os.environ.get("DATABASE_URL") or DatabaseSettings().url)


def _configure(**kwargs) -> None:
    context.configure(target_metadata=target_metadata, compare_type=True, **kwargs)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    """Emit the migration SQL without a database connection."""
    _configure(
        url=get_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )


def run_migrations_online() -> None:
    engine = create_engine(get_url(), poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            # SQLite alters tables by copy-and-move
            _configure(
                connection=connection,
                render_as_batch=connection.dialect.name == "sqlite",
            )
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
