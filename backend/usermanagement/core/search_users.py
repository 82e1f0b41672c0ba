"""User Search — free-text lookup across first and last name.

Invariants:
    - Pure function: no IO, no async, no DB
    - Case-insensitive substring match on first_name OR last_name
    - Blank query returns every record; order always preserved
    - Must agree with SqlUserRepository.search on every backend (SQLite gets a Python lower())

Design Decisions:
    - Kept separate from filter_users: search is OR-across-fields substring,
      filtering is AND-across-fields prefix
"""

from typing import Sequence

from usermanagement.core.domain_types import UserRecord


def _field_contains(value: str | None, needle: str) -> bool:
    return value is not None and needle in value.lower()


def search_users(records: Sequence[UserRecord], query: str) -> list[UserRecord]:
    """Return records whose first or last name contains query."""
    if not query or not query.strip():
        return list(records)
    needle = query.lower()
    return [
        r for r in records
        if _field_contains(r.first_name, needle)
        or _field_contains(r.last_name, needle)
    ]
