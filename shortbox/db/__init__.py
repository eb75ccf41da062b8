"""
Storage for the links table.

- DatabaseAdapter: backend interface (SQLiteAdapter is the default)
- Session management: the async engine, session factory and FastAPI dependency
"""

from shortbox.db.interface import DatabaseAdapter
from shortbox.db.session import async_session_maker, engine, get_session, init_models

__all__ = [
    "DatabaseAdapter",
    "async_session_maker",
    "engine",
    "get_session",
    "init_models",
]
