"""
Pydantic schemas for authentication requests and responses.
"""

from pydantic import EmailStr, Field, field_validator, model_validator
from realevr.models.user import MembershipPlan
from realevr.schemas.base import CamelModel
from realevr.schemas.user import UserResponse


class LoginRequest(CamelModel):
    """Login credentials."""

    username: str = Field(..., min_length=1, description="Account username")
    password: str = Field(..., min_length=1, description="Account password")


class RegisterRequest(CamelModel):
    """Self-service registration form."""

    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6, max_length=128)
    confirm_password: str
    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=255)
    membership_plan: MembershipPlan = MembershipPlan.BASIC

    @field_validator("username", "full_name", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class AuthResponse(CamelModel):
    """Authenticated user with a bearer token."""

    user: UserResponse
    access_token: str
    token_type: str = "bearer"
    expires_in: int
