"""Email Uniqueness — survivor selection for the email-uniqueness migration.

Invariants:
    - Pure functions: rows in, rows out; input is never mutated
    - Exactly one row survives per distinct email: the one with the lowest id
    - Survivors are returned in ascending id order
    - Email comparison is exact (the unique index compares exact values)

Design Decisions:
    - Lowest id wins: deterministic, so every replica migrates to the same data
"""

from collections import Counter
from typing import Iterable, Mapping


def select_survivors(rows: Iterable[Mapping]) -> list[Mapping]:
    """Keep the lowest-id row for every distinct email."""
    survivors: dict[str, Mapping] = {}
    for row in rows:
        kept = survivors.get(row["email"])
        if kept is None or row["id"] < kept["id"]:
            survivors[row["email"]] = row
    return sorted(survivors.values(), key=lambda r: r["id"])


def find_duplicate_emails(rows: Iterable[Mapping]) -> list[str]:
    """Emails held by more than one row, sorted."""
    counts = Counter(row["email"] for row in rows)
    return sorted(email for email, n in counts.items() if n > 1)
