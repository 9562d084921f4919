"""
Pydantic schemas for request/response validation.
"""

from .base import CamelModel
from .property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyFilter,
    ViewCountResponse
)
from .user import (
    UserInDB,
    UserResponse,
    UserCreate,
    UserUpdate,
    RoleUpdate
)
from .auth import LoginRequest, RegisterRequest, AuthResponse
from .catalog import (
    AmenityCreate,
    AmenityResponse,
    PropertyTypeCreate,
    PropertyTypeResponse
)
from .payment import (
    PaymentType,
    DepositRequest,
    DepositResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse
)
from .upload import ImageUploadResponse, TourUploadResponse

__all__ = [
    "CamelModel",
    # Property schemas
    "PropertyCreate",
    "PropertyUpdate",
    "PropertyResponse",
    "PropertyFilter",
    "ViewCountResponse",
    # User schemas
    "UserInDB",
    "UserResponse",
    "UserCreate",
    "UserUpdate",
    "RoleUpdate",
    # Auth schemas
    "LoginRequest",
    "RegisterRequest",
    "AuthResponse",
    # Catalog schemas
    "AmenityCreate",
    "AmenityResponse",
    "PropertyTypeCreate",
    "PropertyTypeResponse",
    # Payment schemas
    "PaymentType",
    "DepositRequest",
    "DepositResponse",
    "VerifyPaymentRequest",
    "VerifyPaymentResponse",
    # Upload schemas
    "ImageUploadResponse",
    "TourUploadResponse",
]
