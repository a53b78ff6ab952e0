"""create_photo_priorities_and_profiles

Revision ID: 3f9a2c71b8d4
Revises:
Create Date: 2026-10-19 09:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9a2c71b8d4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create per-user priority overrides and caller profiles"""
    op.create_table(
        'photo_priorities',
        sa.Column('id', sa.UUID(), nullable=False, server_default=sa.text('gen_random_uuid()')),
        sa.Column('photo_id', sa.String(length=255), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('priority', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('photo_id', 'user_id', name='uq_photo_priorities_photo_user'),
        sa.CheckConstraint("priority IN ('high', 'medium', 'low')", name='ck_photo_priorities_priority'),
    )
    op.create_index('ix_photo_priorities_photo_id', 'photo_priorities', ['photo_id'])
    op.create_index('ix_photo_priorities_user_id', 'photo_priorities', ['user_id'])

    op.create_table(
        'profiles',
        sa.Column('id', sa.UUID(), nullable=False, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('location', sa.String(length=100), nullable=False, server_default='United States'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index('ix_profiles_user_id', 'profiles', ['user_id'])


def downgrade() -> None:
    """Drop profiles and priority overrides"""
    op.drop_index('ix_profiles_user_id', table_name='profiles')
    op.drop_table('profiles')
    op.drop_index('ix_photo_priorities_user_id', table_name='photo_priorities')
    op.drop_index('ix_photo_priorities_photo_id', table_name='photo_priorities')
    op.drop_table('photo_priorities')
