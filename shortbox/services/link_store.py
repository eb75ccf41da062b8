"""
Link Store

Key-value access to the links table. The rest of the service only ever sees
get/put/delete/list over string keys and JSON-object values; SQL stays
behind this class.

Design Decisions:
- Keys are slugs that already passed a slug policy
- Values are JSON documents, stored opaquely
- No transactions across calls (each write commits on its own)
- list() pages in key order with the last key as cursor
"""

import json
import logging
from typing import Any, Dict, List, NamedTuple, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shortbox.core.exceptions import DatabaseError
from shortbox.db.models import LinkEntry

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000


class KeyPage(NamedTuple):
    """One page of keys from LinkStore.list()."""
    keys: List[str]
    cursor: Optional[str]
    list_complete: bool


class LinkStore:
    """Opaque key-value store backed by one SQL table."""

    def __init__(self, session: AsyncSession):
        """
        Args:
            session: Async database session for this request
        """
        self.session = session

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Fetch the value stored under a key.

        Returns:
            The decoded record, or None if the key is absent or the stored
            value is not a JSON object

        Raises:
            DatabaseError: If the read fails
        """
        try:
            entry = await self.session.get(LinkEntry, key)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to read key '{key}'", original_error=e)

        if entry is None:
            return None

        try:
            value = json.loads(entry.value)
        except ValueError:
            logger.warning(f"Stored value for key '{key}' is not valid JSON")
            return None
        return value if isinstance(value, dict) else None

    async def exists(self, key: str) -> bool:
        try:
            result = await self.session.execute(
                select(LinkEntry.key).where(LinkEntry.key == key)
            )
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to read key '{key}'", original_error=e)
        return result.scalar_one_or_none() is not None

    async def put(self, key: str, value: Dict[str, Any]) -> None:
        """
        Store a value under a key, overwriting any previous value.

        Raises:
            DatabaseError: If the write fails
        """
        document = json.dumps(value, separators=(",", ":"))
        try:
            entry = await self.session.get(LinkEntry, key)
            if entry is None:
                self.session.add(LinkEntry(key=key, value=document))
            else:
                entry.value = document
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(f"Failed to write key '{key}'", original_error=e)

    async def delete(self, key: str) -> None:
        """Delete a key. Deleting a missing key is not an error."""
        try:
            await self.session.execute(delete(LinkEntry).where(LinkEntry.key == key))
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(f"Failed to delete key '{key}'", original_error=e)

    async def list(self, cursor: Optional[str] = None, limit: int = DEFAULT_PAGE_SIZE) -> KeyPage:
        """
        List keys in ascending order, one page at a time.

        Args:
            cursor: Last key of the previous page, None for the first page
            limit: Page size

        Returns:
            KeyPage; list_complete is True on the last page
        """
        statement = select(LinkEntry.key).order_by(LinkEntry.key).limit(limit)
        if cursor is not None:
            statement = statement.where(LinkEntry.key > cursor)

        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to list keys", original_error=e)

        keys = list(result.scalars().all())
        return KeyPage(
            keys=keys,
            cursor=keys[-1] if keys else None,
            list_complete=len(keys) < limit,
        )
