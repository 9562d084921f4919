"""
Pydantic schemas for user records and admin updates.
"""

from pydantic import EmailStr, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime
from realevr.models.user import UserRole, MembershipPlan
from realevr.schemas.base import CamelModel


class UserBase(CamelModel):
    """Fields shared by stored users and user responses."""

    id: int
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: UserRole = UserRole.USER
    is_verified: bool = False
    membership_plan: Optional[MembershipPlan] = None
    membership_start_date: Optional[datetime] = None
    membership_end_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class UserInDB(UserBase):
    """Stored user including the password hash. Never returned by the API."""

    password: str


class UserResponse(UserBase):
    """Public user representation."""


class UserCreate(CamelModel):
    """Data needed to store a new user. `password` is already hashed."""

    username: str
    password: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: UserRole = UserRole.USER
    is_verified: bool = False
    membership_plan: Optional[MembershipPlan] = None
    membership_start_date: Optional[datetime] = None
    membership_end_date: Optional[datetime] = None


class UserUpdate(CamelModel):
    """Admin update of role, verification and membership fields."""

    role: Optional[UserRole] = None
    is_verified: Optional[bool] = None
    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    membership_plan: Optional[MembershipPlan] = None
    membership_start_date: Optional[datetime] = None
    membership_end_date: Optional[datetime] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip() if v else v

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        for name in ("role", "is_verified"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class RoleUpdate(CamelModel):
    """Body of PATCH /users/{id}/role."""

    role: UserRole
