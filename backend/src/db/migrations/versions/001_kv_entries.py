"""Ordered key-value index

Revision ID: 001_kv_entries
Revises:
Create Date: 2026-10-19

Creates the kv_entries table that holds the artifact index:
- ("bin", version, system, name) -> BinaryFile
- ("latest", channel) -> ReleaseVersion
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '001_kv_entries'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create the kv_entries table."""
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        # Byte-wise ordering keeps prefix range scans correct
        key_type = sa.String(1024, collation='C')
        value_type = postgresql.JSONB()
    else:
        key_type = sa.String(1024)
        value_type = sa.JSON()

    op.create_table(
        'kv_entries',
        sa.Column('key', key_type, primary_key=True),
        sa.Column('value', value_type, nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    """Drop the kv_entries table."""
    op.drop_table('kv_entries')
