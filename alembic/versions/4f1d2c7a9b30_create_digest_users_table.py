"""create digest_users table

Revision ID: 4f1d2c7a9b30
Revises:
Create Date: 2025-09-08 09:00:00.000000

Adds digest_users: one row per person enrolled in the morning digest,
holding the Google refresh token, the cached access token with its
expiry, and the time zone the digest is rendered in.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1d2c7a9b30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the digest_users table."""
    op.create_table(
        'digest_users',
        # Primary key
        sa.Column('id', sa.Uuid(), nullable=False),

        # Recipient, and the upsert key for signups
        sa.Column('email', sa.String(length=255), nullable=False),

        # Google credentials
        sa.Column('google_refresh_token', sa.Text(), nullable=False),
        sa.Column('google_access_token', sa.Text(), nullable=True),
        sa.Column('token_expires_at', sa.DateTime(timezone=True), nullable=True),

        # Preferences
        sa.Column('timezone', sa.String(length=64), nullable=False,
                  server_default='America/Los_Angeles'),
        sa.Column('digest_enabled', sa.Boolean(), nullable=False,
                  server_default=sa.true()),

        # Timestamps
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),

        sa.PrimaryKeyConstraint('id'),
    )

    # Unique index on email for signup upserts
    op.create_index(
        op.f('ix_digest_users_email'),
        'digest_users',
        ['email'],
        unique=True
    )

    # The scheduled run only reads enabled users
    op.create_index(
        op.f('ix_digest_users_digest_enabled'),
        'digest_users',
        ['digest_enabled'],
        unique=False
    )


def downgrade() -> None:
    """Drop the digest_users table."""
    op.drop_index(op.f('ix_digest_users_digest_enabled'), table_name='digest_users')
    op.drop_index(op.f('ix_digest_users_email'), table_name='digest_users')
    op.drop_table('digest_users')
