"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId wraps the storage-assigned integer key: never invented by core
    - UserRecord is frozen: core code selects records, never mutates them
    - All valid states encoded as Enums: no raw string matching

Design Decisions:
    - NewType over wrapper classes: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", int)
Revision = NewType("Revision", str)


# ─── Records ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class UserRecord:
    """Snapshot of one stored user. dob/address ride along untouched."""
    id: UserId
    first_name: str
    last_name: str | None
    email: str
    phone: str
    dob: str = ""
    address: str = ""

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)


# ─── Enums ───────────────────────────────────────────────────────

class MigrationState(str, Enum):
    """Lifecycle of a single schema migration step."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class UserField(str, Enum):
    """User fields that carry validation rules."""
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    EMAIL = "email"
    PHONE = "phone"
    DOB = "dob"
