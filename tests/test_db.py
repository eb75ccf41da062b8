import sqlite3
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import text
from sqlalchemy.pool import NullPool

from shortbox.core.setting import settings
from shortbox.db.session import engine, init_models
from shortbox.db.sqlite_adapter import BUSY_TIMEOUT_MS, SQLiteAdapter, get_database_adapter


class TestAdapterSelection:
    def test_sqlite_url(self):
        assert isinstance(get_database_adapter("sqlite+aiosqlite:///./links.db"), SQLiteAdapter)

    def test_unsupported_url(self):
        with pytest.raises(ValueError, match="Unsupported DATABASE_URL dialect"):
            get_database_adapter("mysql+aiomysql://user@host/db")

    def test_adapter_refuses_foreign_url(self):
        with pytest.raises(ValueError):
            SQLiteAdapter().create_engine("postgresql+asyncpg://localhost/links")

    def test_engine_options(self):
        options = SQLiteAdapter().engine_options()
        assert options["poolclass"] is NullPool
        assert options["connect_args"] == {"check_same_thread": False}


class TestSQLiteConnection:
    @pytest.mark.asyncio
    async def test_pragmas_applied(self):
        await init_models()
        async with engine.connect() as connection:
            journal_mode = (await connection.execute(text("PRAGMA journal_mode"))).scalar()
            busy_timeout = (await connection.execute(text("PRAGMA busy_timeout"))).scalar()
        assert journal_mode == "wal"
        assert busy_timeout == BUSY_TIMEOUT_MS

    @pytest.mark.asyncio
    async def test_links_table_created(self):
        await init_models()
        async with engine.connect() as connection:
            result = await connection.execute(
                text("SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'links'")
            )
            assert result.scalar() == "links"


MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"


def alembic_config() -> Config:
    # No ini file, so fileConfig() leaves the test loggers alone
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    return config


class TestMigrations:
    def test_upgrade_creates_links_table(self, tmp_path, monkeypatch):
        database = tmp_path / "migrated.db"
        monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite+aiosqlite:///{database}")

        command.upgrade(alembic_config(), "head")

        with sqlite3.connect(database) as connection:
            tables = {row[0] for row in connection.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
            indexes = {row[0] for row in connection.execute("SELECT name FROM sqlite_master WHERE type = 'index'")}
        assert "links" in tables
        assert "alembic_version" in tables
        assert "ix_links_created_at" in indexes

    def test_downgrade_drops_links_table(self, tmp_path, monkeypatch):
        database = tmp_path / "migrated.db"
        monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite+aiosqlite:///{database}")

        command.upgrade(alembic_config(), "head")
        command.downgrade(alembic_config(), "base")

        with sqlite3.connect(database) as connection:
            tables = {row[0] for row in connection.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
        assert "links" not in tables

    def test_unsupported_dialect_refused(self, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "DATABASE_URL", "mysql+aiomysql://user@host/db")
        with pytest.raises(ValueError, match="Unsupported DATABASE_URL dialect"):
            command.upgrade(alembic_config(), "head")
