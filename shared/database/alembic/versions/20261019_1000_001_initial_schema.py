"""Initial database schema for the stock watchlist service

Revision ID: 20261019_1000_001
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '20261019_1000_001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users and watchlist tables."""

    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False, comment='Generic record identifier'),
        sa.Column('public_id', sa.String(length=64), nullable=True, comment='Explicit user identifier, if issued'),
        sa.Column('email', sa.String(length=255), nullable=False, comment='Login email (lookup key)'),
        sa.Column('name', sa.String(length=100), nullable=True, comment='Display name'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('public_id')
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    # Create watchlist table
    op.create_table(
        'watchlist',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False, comment="Owning user's identifier"),
        sa.Column('symbol', sa.String(length=20), nullable=False, comment='Ticker symbol, stored as given'),
        sa.Column('company', sa.String(length=200), nullable=False, comment='Company name captured when added'),
        sa.Column('added_at', sa.DateTime(), nullable=False, comment='Date added to watchlist'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'symbol', name='uq_watchlist_user_symbol')
    )
    op.create_index(op.f('ix_watchlist_id'), 'watchlist', ['id'], unique=False)
    op.create_index(op.f('ix_watchlist_user_id'), 'watchlist', ['user_id'], unique=False)
    op.create_index('ix_watchlist_user_added', 'watchlist', ['user_id', 'added_at'], unique=False)


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('watchlist')
    op.drop_table('users')
