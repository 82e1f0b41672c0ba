"""Initial schema — users table without an email constraint.

Revision ID: 001_initial_users
Revises: None
Create Date: 2026-10-05

"""
from typing import Sequence, Union

from alembic import op

from usermanagement.db.migration_steps import create_users_table

revision: str = "001_initial_users"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    create_users_table(op)


def downgrade() -> None:
    op.drop_table("users")
