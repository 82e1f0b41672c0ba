"""Migration Steps — data-carrying bodies of Alembic revisions.

Invariants:
    - Runs on the migration connection; never commits (the runner owns the transaction)
    - enforce_unique_email keeps exactly one row per email: the lowest id
    - Surviving rows keep their ids; descriptive columns are copied unchanged
    - After the step, users has unique index ix_users_email and no duplicate emails

Design Decisions:
    - Rebuild-and-swap (users_new -> users) instead of deleting in place: works on
      SQLite, which cannot add constraints to an existing table
    - Survivors chosen in Python (core.email_uniqueness) rather than GROUP BY:
      identical result on every dialect
"""

import logging

import sqlalchemy as sa
from alembic.operations import Operations

from usermanagement.core.email_uniqueness import find_duplicate_emails, select_survivors
from usermanagement.core.errors import MigrationError

logger = logging.getLogger(__name__)

_USER_COLUMNS = ("id", "first_name", "last_name", "email", "phone", "dob", "address")


def _user_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(254), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("dob", sa.String(10), nullable=False, server_default=""),
        sa.Column("address", sa.String(500), nullable=False, server_default=""),
    ]


def create_users_table(op: Operations, name: str = "users") -> sa.Table:
    return op.create_table(name, *_user_columns())


def enforce_unique_email(op: Operations) -> None:
    """Deduplicate users by email (lowest id wins) and add the unique index."""
    bind = op.get_bind()

    # 1. target schema
    users_new = create_users_table(op, "users_new")

    # 2. one survivor per email
    old_users = sa.table("users", *(sa.column(c) for c in _USER_COLUMNS))
    rows = [dict(r) for r in bind.execute(sa.select(old_users)).mappings()]
    survivors = select_survivors(rows)
    logger.info(
        f"Email uniqueness: keeping {len(survivors)} of {len(rows)} users",
        extra={"revision": "003_unique_email"},
    )

    # 3. copy survivors
    if survivors:
        op.bulk_insert(users_new, survivors)

    # 4-5. swap tables
    op.drop_table("users")
    op.rename_table("users_new", "users")

    # 6. constraint
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    if bind.dialect.name == "postgresql":
        # explicit ids were copied; move the sequence past them
        op.execute(
            "SELECT setval(pg_get_serial_sequence('users', 'id'), "
            "COALESCE(MAX(id), 1), MAX(id) IS NOT NULL) FROM users"
        )

    remaining = [
        dict(r) for r in bind.execute(sa.select(old_users.c.id, old_users.c.email)).mappings()
    ]
    duplicates = find_duplicate_emails(remaining)
    if duplicates:
        raise MigrationError(
            f"duplicate emails remain: {', '.join(duplicates)}", "003_unique_email",
        )
