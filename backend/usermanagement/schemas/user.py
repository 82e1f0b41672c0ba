"""User Schemas — Pydantic models for the user endpoints.

Invariants:
    - UserCreate/UserUpdate strip surrounding whitespace from every field
    - Field rules (blank, email, phone, dob) live in core/validate_user.py;
      routes apply them so errors carry the domain error envelope
    - UserResponse mirrors UserRecord one to one
"""

from pydantic import BaseModel, Field, field_validator

from usermanagement.core.domain_types import UserRecord


class UserCreate(BaseModel):
    """User creation payload."""
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    email: str = Field(max_length=254)
    phone: str = Field(max_length=20)
    dob: str = Field("", max_length=10)
    address: str = Field("", max_length=500)

    @field_validator("*", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class UserUpdate(UserCreate):
    """Full replacement of a user's fields (id is taken from the path)."""


class UserResponse(BaseModel):
    id: int
    first_name: str
    last_name: str | None
    email: str
    phone: str
    dob: str = ""
    address: str = ""
    full_name: str

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserResponse":
        return cls(
            id=record.id,
            first_name=record.first_name,
            last_name=record.last_name,
            email=record.email,
            phone=record.phone,
            dob=record.dob,
            address=record.address,
            full_name=record.full_name,
        )


class UserListResponse(BaseModel):
    users: list[UserResponse]
    total: int
