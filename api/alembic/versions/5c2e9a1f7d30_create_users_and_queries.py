"""create_users_and_queries

Revision ID: 5c2e9a1f7d30
Revises:
Create Date: 2026-10-19 09:12:44.118402

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5c2e9a1f7d30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # versions and tags hold JSON text
    op.create_table(
        'queries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('sql', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('result', sa.Text(), nullable=False, server_default=''),
        sa.Column('result_image', sa.Text(), nullable=True),
        sa.Column('date', sa.String(length=32), nullable=False, server_default=''),
        sa.Column('timestamp', sa.String(length=64), nullable=False, server_default=''),
        sa.Column('last_edited', sa.String(length=64), nullable=True),
        sa.Column('versions', sa.Text(), nullable=True),
        sa.Column('current_version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('tags', sa.Text(), nullable=True),
        sa.Column('is_favorite', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('visibility', sa.String(length=16), nullable=False, server_default='private'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_queries_user_id', 'queries', ['user_id'])
    op.create_index('ix_queries_visibility', 'queries', ['visibility'])


def downgrade() -> None:
    op.drop_index('ix_queries_visibility', table_name='queries')
    op.drop_index('ix_queries_user_id', table_name='queries')
    op.drop_table('queries')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
