"""User ORM — the single persisted relation of the directory.

Invariants:
    - id is an auto-assigned, monotonic integer primary key
    - first_name, last_name, email, phone are non-nullable text
    - email is unique (index ix_users_email, introduced by revision 003)
    - dob and address are optional descriptive columns, never filtered on

Design Decisions:
    - Unique index rather than a table constraint: revision 003 adds it after
      deduplicating, and it can be created on an existing table
"""

from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from usermanagement.core.domain_types import UserId, UserRecord
from usermanagement.db.base import Base


class User(Base):
    """Persisted user row."""
    __tablename__ = "users"
    __table_args__ = (
        Index("ix_users_email", "email", unique=True),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    dob: Mapped[str] = mapped_column(
        String(10), nullable=False, default="", server_default="",
    )
    address: Mapped[str] = mapped_column(
        String(500), nullable=False, default="", server_default="",
    )

    def to_record(self) -> UserRecord:
        return UserRecord(
            id=UserId(self.id),
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            phone=self.phone,
            dob=self.dob,
            address=self.address,
        )
