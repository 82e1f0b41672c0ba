"""Reserved slot — no structural or data change.

Revision ID: 002_reserved_reset
Revises: 001_initial_users
Create Date: 2026-10-09

Kept so the revision chain matches stores that were stamped at this
revision. Declared is_noop: the migrator completes it without running it
as a data step. Nothing is dropped or reset here.
"""
from typing import Sequence, Union

revision: str = "002_reserved_reset"
down_revision: Union[str, None] = "001_initial_users"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

is_noop = True


def upgrade() -> None:
    pass


def downgrade() -> None:
    pass
