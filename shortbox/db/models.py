"""
Database Models for the Link Store

The service treats storage as an opaque key-value store, so there is a
single table:
- LinkEntry: one row per slug; the link record is kept as a JSON document

Design Decisions:
- Slug is the primary key (lookups and deletes are always by slug)
- Value is opaque text; the store never interprets it
- created_at is bookkeeping for operators, not part of the record
"""

from datetime import datetime, timezone

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import String, DateTime, Text


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LinkEntry(SQLModel, table=True):
    """
    Key-value row.

    Fields:
    - key: Slug (lookup policy caps it at 64 characters)
    - value: JSON-encoded link record
    - created_at: When the row was first written
    """
    __tablename__ = "links"

    key: str = Field(sa_column=Column(String(64), primary_key=True))
    value: str = Field(sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
