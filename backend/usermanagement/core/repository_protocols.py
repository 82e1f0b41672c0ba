"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell: dependency arrows point inward only
    - All storage access goes through UserRepository
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: implementations do IO, but the core functions that
      consume their results (filter_users, search_users) stay synchronous
"""

from typing import Protocol

from usermanagement.core.domain_types import UserId, UserRecord


class UserRepository(Protocol):
    """Contract for user persistence — implemented by shell."""
    async def get_all(self) -> list[UserRecord]: ...
    async def get_by_id(self, user_id: UserId) -> UserRecord | None: ...
    async def get_by_email(self, email: str) -> UserRecord | None: ...
    async def insert(self, fields: dict) -> UserRecord: ...
    async def update(self, user_id: UserId, fields: dict) -> UserRecord: ...
    async def delete(self, user_id: UserId) -> None: ...
    async def search(self, query: str) -> list[UserRecord]: ...
