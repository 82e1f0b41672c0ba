"""SQL User Repository — UserRepository backed by the users table.

Invariants:
    - Returns UserRecord snapshots, never live ORM objects
    - get_all and search order by id (insertion order)
    - Unique-email violations surface as DuplicateEmailError, missing ids as
      ResourceNotFoundError; the session is rolled back in both cases
    - search matches core.search_users: lower(first_name) or lower(last_name)
      contains lower(query); blank query returns everything

Design Decisions:
    - Commits per write: each insert/update/delete is its own unit of work
    - LIKE wildcards in the query are escaped (autoescape) so '%' and '_' match literally
"""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from usermanagement.core.domain_types import UserId, UserRecord
from usermanagement.core.errors import (
    DuplicateEmailError, ErrorContext, ResourceNotFoundError,
)
from usermanagement.models.user import User

logger = logging.getLogger(__name__)

_WRITABLE_FIELDS = ("first_name", "last_name", "email", "phone", "dob", "address")


class SqlUserRepository:
    """UserRepository implementation over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def get_all(self) -> list[UserRecord]:
        result = await self._db.execute(select(User).order_by(User.id))
        return [u.to_record() for u in result.scalars().all()]

    async def get_by_id(self, user_id: UserId) -> UserRecord | None:
        user = await self._db.get(User, user_id)
        return user.to_record() if user else None

    async def get_by_email(self, email: str) -> UserRecord | None:
        result = await self._db.execute(
            select(User).where(User.email == email).limit(1),
        )
        user = result.scalar_one_or_none()
        return user.to_record() if user else None

    async def insert(self, fields: dict) -> UserRecord:
        user = User(**{k: v for k, v in fields.items() if k in _WRITABLE_FIELDS})
        self._db.add(user)
        await self._commit(fields.get("email", ""), None)
        await self._db.refresh(user)
        logger.info(f"User {user.id} created", extra={"user_id": user.id})
        return user.to_record()

    async def update(self, user_id: UserId, fields: dict) -> UserRecord:
        user = await self._db.get(User, user_id)
        if user is None:
            raise ResourceNotFoundError("User", str(user_id))
        for key, value in fields.items():
            if key in _WRITABLE_FIELDS:
                setattr(user, key, value)
        await self._commit(user.email, user_id)
        await self._db.refresh(user)
        logger.info(f"User {user_id} updated", extra={"user_id": user_id})
        return user.to_record()

    async def delete(self, user_id: UserId) -> None:
        user = await self._db.get(User, user_id)
        if user is None:
            raise ResourceNotFoundError("User", str(user_id))
        await self._db.delete(user)
        await self._db.commit()
        logger.info(f"User {user_id} deleted", extra={"user_id": user_id})

    async def search(self, query: str) -> list[UserRecord]:
        stmt = select(User).order_by(User.id)
        if query and query.strip():
            needle = query.lower()
            stmt = stmt.where(
                or_(
                    func.lower(User.first_name).contains(needle, autoescape=True),
                    func.lower(User.last_name).contains(needle, autoescape=True),
                ),
            )
        result = await self._db.execute(stmt)
        return [u.to_record() for u in result.scalars().all()]

    async def _commit(self, email: str, user_id: UserId | None) -> None:
        try:
            await self._db.commit()
        except IntegrityError as e:
            await self._db.rollback()
            logger.warning(
                f"Rejected write for duplicate email: {e.orig}",
                extra={"error_code": "DUPLICATE_EMAIL", "user_id": user_id},
            )
            raise DuplicateEmailError(
                email, ErrorContext(user_id=user_id),
            ) from e
