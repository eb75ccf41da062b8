"""
Database Backend Interface

The link store only needs an async engine; everything backend-specific
(pooling, connect arguments, per-connection setup) lives behind this
interface so a different database can back the links table without
touching LinkStore.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine


class DatabaseAdapter(ABC):
    """
    Base class for database backends.

    Subclasses declare which URLs they accept and how their engine is
    configured; create_engine() puts the pieces together.
    """

    # Dialect prefix of the URLs this adapter accepts, e.g. "sqlite"
    dialect: str = ""

    def accepts(self, database_url: str) -> bool:
        return database_url.split(":", 1)[0].split("+", 1)[0] == self.dialect

    def create_engine(self, database_url: str, **kwargs: Any) -> AsyncEngine:
        """
        Build the async engine and register on_connect() for every new
        DBAPI connection.

        Args:
            database_url: Async connection string
            **kwargs: Engine options that override engine_options()

        Raises:
            ValueError: If the URL belongs to another backend
        """
        if not self.accepts(database_url):
            raise ValueError(f"{type(self).__name__} cannot open a '{database_url.split(':', 1)[0]}' URL")

        options = self.engine_options()
        options.update(kwargs)
        engine = create_async_engine(database_url, **options)
        event.listen(engine.sync_engine, "connect", self.on_connect)
        return engine

    @abstractmethod
    def engine_options(self) -> Dict[str, Any]:
        """Keyword arguments for create_async_engine (pool class, connect_args, ...)."""

    @abstractmethod
    def on_connect(self, dbapi_connection: Any, connection_record: Any) -> None:
        """Per-connection setup, run once for each new DBAPI connection."""
