"""
Alembic Environment Configuration

Migrations for the links table. The application talks to SQLite through
aiosqlite; migrations run on the stdlib sqlite3 driver against the same
file. DATABASE_URL goes through the same adapter lookup as the app, so an
unsupported dialect fails here too.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool
from sqlmodel import SQLModel

from shortbox.core.setting import settings
from shortbox.db.models import LinkEntry  # noqa: F401  registers the links table
from shortbox.db.sqlite_adapter import get_database_adapter

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = SQLModel.metadata

ASYNC_DRIVER_PREFIX = "sqlite+aiosqlite://"
SYNC_DRIVER_PREFIX = "sqlite://"


def sync_database_url(database_url: str) -> str:
    """
    Swap the async driver for the sync one.

    sqlite+aiosqlite:///./links.db -> sqlite:///./links.db
    """
    get_database_adapter(database_url)
    if database_url.startswith(ASYNC_DRIVER_PREFIX):
        return SYNC_DRIVER_PREFIX + database_url[len(ASYNC_DRIVER_PREFIX):]
    return database_url


def run_migrations_offline() -> None:
    """Emit SQL to stdout without a database connection."""
    context.configure(
        url=sync_database_url(settings.DATABASE_URL),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = create_engine(sync_database_url(settings.DATABASE_URL), poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()
    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
