"""Enforce unique emails — deduplicate users (lowest id wins) and add ix_users_email.

Revision ID: 003_unique_email
Revises: 002_reserved_reset
Create Date: 2026-10-14

Historical data may hold several users per email. The table is rebuilt with
one survivor per email before the unique index is created. Forward only:
discarded duplicates cannot be restored.
"""
from typing import Sequence, Union

from alembic import op

from usermanagement.db import migration_steps

revision: str = "003_unique_email"
down_revision: Union[str, None] = "002_reserved_reset"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    migration_steps.enforce_unique_email(op)


def downgrade() -> None:
    raise NotImplementedError("003_unique_email is forward-only")
