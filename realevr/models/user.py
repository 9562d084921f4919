"""
User model with authentication, role and membership fields.
"""

from sqlalchemy import String, Boolean, DateTime, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from realevr.database import Base
from datetime import datetime, timezone
from typing import Optional
import enum


class UserRole(str, enum.Enum):
    """User role enumeration for role-based access control."""
    USER = "user"
    PROPERTY_MANAGER = "property_manager"
    ADMIN = "admin"


class MembershipPlan(str, enum.Enum):
    """Membership tiers. Displayed only; no feature gating is attached."""
    BASIC = "basic"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"


def _enum_column(enum_cls):
    return SQLEnum(
        enum_cls,
        values_callable=lambda e: [member.value for member in e],
        native_enum=False,
        length=32,
    )


class User(Base):
    """User account. `password` holds the bcrypt hash."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    full_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    role: Mapped[UserRole] = mapped_column(_enum_column(UserRole), nullable=False, default=UserRole.USER)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    membership_plan: Mapped[Optional[MembershipPlan]] = mapped_column(_enum_column(MembershipPlan), nullable=True)
    membership_start_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    membership_end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        """String representation of the user."""
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"
