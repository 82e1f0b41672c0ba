"""User Routes — list/filter, search and CRUD over the user directory.

Invariants:
    - GET /users never fails for bad or absent criteria; no match is an empty list
    - Filtering runs core.filter_users over a full snapshot from the repository
    - Search runs storage-side (SqlUserRepository.search)
    - Writes are validated (core.validate_user) and checked for duplicate email
      before reaching storage; the unique index is the final guard
"""

import logging

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from usermanagement.core.domain_types import UserId
from usermanagement.core.errors import (
    DuplicateEmailError, ErrorContext, ResourceNotFoundError, UserValidationError,
)
from usermanagement.core.filter_users import filter_users
from usermanagement.core.repository_protocols import UserRepository
from usermanagement.core.validate_user import validate_user_fields
from usermanagement.infrastructure.database import get_db
from usermanagement.infrastructure.user_repository import SqlUserRepository
from usermanagement.schemas.user import (
    UserCreate, UserListResponse, UserResponse, UserUpdate,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/users", tags=["users"])


def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return SqlUserRepository(db)


def _validate(body: UserCreate, user_id: int | None = None) -> None:
    error = validate_user_fields(
        body.first_name, body.last_name, body.email, body.phone, body.dob,
    )
    if error:
        raise UserValidationError(
            error["message"], error["field"], ErrorContext(user_id=user_id),
        )


async def _ensure_email_free(
    repo: UserRepository, email: str, user_id: int | None = None,
) -> None:
    existing = await repo.get_by_email(email)
    if existing is not None and existing.id != user_id:
        raise DuplicateEmailError(email, ErrorContext(user_id=user_id))


def _list_response(records) -> UserListResponse:
    return UserListResponse(
        users=[UserResponse.from_record(r) for r in records],
        total=len(records),
    )


@router.get("", response_model=UserListResponse)
async def list_users(
    first_name: str | None = Query(None),
    last_name: str | None = Query(None),
    email: str | None = Query(None),
    phone: str | None = Query(None),
    repo: UserRepository = Depends(get_user_repository),
):
    """List users narrowed by any combination of the four criteria."""
    users = await repo.get_all()
    return _list_response(
        filter_users(users, first_name, last_name, email, phone),
    )


@router.get("/search", response_model=UserListResponse)
async def search(
    q: str = Query(""),
    repo: UserRepository = Depends(get_user_repository),
):
    """Case-insensitive substring search over first and last name."""
    return _list_response(await repo.search(q))


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int, repo: UserRepository = Depends(get_user_repository),
):
    user = await repo.get_by_id(UserId(user_id))
    if user is None:
        raise ResourceNotFoundError("User", str(user_id))
    return UserResponse.from_record(user)


@router.post(
    "", response_model=UserResponse, status_code=status.HTTP_201_CREATED,
)
async def create_user(
    body: UserCreate, repo: UserRepository = Depends(get_user_repository),
):
    _validate(body)
    await _ensure_email_free(repo, body.email)
    user = await repo.insert(body.model_dump())
    return UserResponse.from_record(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    body: UserUpdate,
    repo: UserRepository = Depends(get_user_repository),
):
    _validate(body, user_id)
    if await repo.get_by_id(UserId(user_id)) is None:
        raise ResourceNotFoundError("User", str(user_id))
    await _ensure_email_free(repo, body.email, user_id)
    user = await repo.update(UserId(user_id), body.model_dump())
    return UserResponse.from_record(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int, repo: UserRepository = Depends(get_user_repository),
):
    await repo.delete(UserId(user_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
