"""In-Memory User Repository — list-backed UserRepository for tests and local snapshots.

Invariants:
    - ids are assigned max(id) + 1 at insert time
    - email uniqueness enforced exactly as the SQL unique index does
    - search delegates to core.search_users (the reference semantics)
"""

from dataclasses import replace

from usermanagement.core.domain_types import UserId, UserRecord
from usermanagement.core.errors import DuplicateEmailError, ResourceNotFoundError
from usermanagement.core.search_users import search_users


class InMemoryUserRepository:
    """UserRepository implementation over a Python list."""

    def __init__(self, users: list[UserRecord] | None = None):
        self._users: list[UserRecord] = list(users or [])

    def set_users(self, users: list[UserRecord]) -> None:
        self._users = list(users)

    def clear(self) -> None:
        self._users = []

    async def get_all(self) -> list[UserRecord]:
        return list(self._users)

    async def get_by_id(self, user_id: UserId) -> UserRecord | None:
        return next((u for u in self._users if u.id == user_id), None)

    async def get_by_email(self, email: str) -> UserRecord | None:
        return next((u for u in self._users if u.email == email), None)

    async def insert(self, fields: dict) -> UserRecord:
        self._ensure_email_free(fields["email"], None)
        new_id = UserId(max((u.id for u in self._users), default=0) + 1)
        record = UserRecord(
            id=new_id,
            first_name=fields["first_name"],
            last_name=fields["last_name"],
            email=fields["email"],
            phone=fields["phone"],
            dob=fields.get("dob", ""),
            address=fields.get("address", ""),
        )
        self._users.append(record)
        return record

    async def update(self, user_id: UserId, fields: dict) -> UserRecord:
        existing = await self.get_by_id(user_id)
        if existing is None:
            raise ResourceNotFoundError("User", str(user_id))
        if "email" in fields:
            self._ensure_email_free(fields["email"], user_id)
        updated = replace(existing, **fields)
        self._users = [updated if u.id == user_id else u for u in self._users]
        return updated

    async def delete(self, user_id: UserId) -> None:
        if await self.get_by_id(user_id) is None:
            raise ResourceNotFoundError("User", str(user_id))
        self._users = [u for u in self._users if u.id != user_id]

    async def search(self, query: str) -> list[UserRecord]:
        return search_users(self._users, query)

    def _ensure_email_free(self, email: str, user_id: UserId | None) -> None:
        if any(u.email == email and u.id != user_id for u in self._users):
            raise DuplicateEmailError(email)
