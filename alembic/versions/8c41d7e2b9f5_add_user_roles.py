"""add_user_roles

Revision ID: 8c41d7e2b9f5
Revises: 5b2e9f1c7a30
Create Date: 2026-10-19 16:03:27.904112

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8c41d7e2b9f5'
down_revision: Union[str, None] = '5b2e9f1c7a30'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Idempotent: databases bootstrapped by init_db() already have this table
    from sqlalchemy import inspect

    bind = op.get_bind()
    inspector = inspect(bind)

    if 'user_roles' not in inspector.get_table_names():
        op.create_table('user_roles',
            sa.Column('user_id', sa.String(length=255), nullable=False),
            sa.Column('role_id', sa.String(length=255), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['role_id'], ['roles.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('user_id', 'role_id')
        )
        op.create_index('idx_user_roles_role_id', 'user_roles', ['role_id'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_user_roles_role_id', table_name='user_roles')
    op.drop_table('user_roles')
