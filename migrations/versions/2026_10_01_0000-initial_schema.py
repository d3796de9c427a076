"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-01 00:00:00.000000

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
    Create initial database schema:
    - short_urls table: Stores URL shortening mappings and click counters
    - link_id_sequence table: Issues identities on SQLite
    - short_url_id_seq sequence: Issues identities on PostgreSQL
    """
    bind = op.get_bind()
    existing_tables = inspect(bind).get_table_names()
    is_sqlite = bind.dialect.name == 'sqlite'

    if not is_sqlite:
        op.execute(sa.schema.CreateSequence(sa.Sequence('short_url_id_seq', start=1)))

    if 'short_urls' not in existing_tables:
        op.create_table(
            'short_urls',
            sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=False),
            sa.Column('original_url', sa.Text(), nullable=False),
            sa.Column('short_code', sa.String(length=11), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('click_count', sa.BigInteger(), nullable=False, server_default='0'),
            sa.Column('last_clicked_at', sa.DateTime(timezone=True), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_short_urls_short_code', 'short_urls', ['short_code'], unique=True)
        op.create_index('ix_short_urls_created_at', 'short_urls', ['created_at'])

    if 'link_id_sequence' not in existing_tables:
        op.create_table(
            'link_id_sequence',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('issued_at', sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint('id'),
            sqlite_autoincrement=True
        )


def downgrade() -> None:
    """Drop all tables, indexes and the identity sequence."""
    bind = op.get_bind()
    is_sqlite = bind.dialect.name == 'sqlite'

    op.drop_table('link_id_sequence')
    op.drop_index('ix_short_urls_created_at', table_name='short_urls')
    op.drop_index('ix_short_urls_short_code', table_name='short_urls')
    op.drop_table('short_urls')

    if not is_sqlite:
        op.execute(sa.schema.DropSequence(sa.Sequence('short_url_id_seq')))
