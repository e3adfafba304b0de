"""create pastes table

Revision ID: 001_initial
Revises: 
Create Date: 2026-10-19 12:00:00.000000

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # One JSON paste document per key, plus the time the store evicts it.
    op.create_table(
        'pastes',
        sa.Column('key', sa.String(length=64), nullable=False),
        sa.Column('document', sa.Text(), nullable=False),
        sa.Column('store_expires_at', sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint('key'),
    )
    op.create_index(op.f('ix_pastes_store_expires_at'), 'pastes', ['store_expires_at'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_pastes_store_expires_at'), table_name='pastes')
    op.drop_table('pastes')
