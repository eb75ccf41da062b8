"""Initial schema: links key-value table

Revision ID: 001_initial
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the links table: one row per slug, value is the JSON link record.
    """
    bind = op.get_bind()
    existing_tables = inspect(bind).get_table_names()

    # Startup may already have created it (CREATE_TABLES)
    if 'links' in existing_tables:
        return

    op.create_table(
        'links',
        sa.Column('key', sa.String(length=64), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('key')
    )

    op.create_index(
        'ix_links_created_at',
        'links',
        ['created_at']
    )


def downgrade() -> None:
    op.drop_index('ix_links_created_at', table_name='links')
    op.drop_table('links')
