"""create_users_and_roles

Revision ID: 5b2e9f1c7a30
Revises:
Create Date: 2026-10-19 10:12:44.518203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b2e9f1c7a30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Idempotent: databases bootstrapped by init_db() already have these tables
    from sqlalchemy import inspect

    bind = op.get_bind()
    inspector = inspect(bind)
    tables = inspector.get_table_names()

    if 'users' not in tables:
        op.create_table('users',
            sa.Column('id', sa.String(length=255), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('custom_id', sa.String(length=50), nullable=False),
            sa.Column('name', sa.String(length=255), nullable=False),
            sa.Column('external_email', sa.String(length=255), nullable=False),
            sa.Column('period', sa.String(length=50), nullable=False),
            sa.Column('is_enable', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('password_hash', sa.String(length=255), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column('joined_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('email'),
            sa.UniqueConstraint('custom_id')
        )
        op.create_index('idx_users_period', 'users', ['period'], unique=False)
        op.create_index('idx_users_is_enable', 'users', ['is_enable'], unique=False)

    if 'roles' not in tables:
        op.create_table('roles',
            sa.Column('id', sa.String(length=255), nullable=False),
            sa.Column('custom_id', sa.String(length=50), nullable=False),
            sa.Column('name', sa.String(length=50), nullable=False),
            sa.Column('permission', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('is_enable', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('is_system', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('custom_id')
        )
        op.create_index('idx_roles_is_system', 'roles', ['is_system'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_roles_is_system', table_name='roles')
    op.drop_table('roles')
    op.drop_index('idx_users_is_enable', table_name='users')
    op.drop_index('idx_users_period', table_name='users')
    op.drop_table('users')
