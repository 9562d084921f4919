"""
FastAPI dependency injection utilities for storage, services and authentication.
Provides reusable dependencies for route protection and user extraction.
"""

from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from realevr.config import settings
from realevr.models.user import UserRole
from realevr.schemas.user import UserInDB
from realevr.services.auth import AuthService
from realevr.services.payment import FlutterwaveClient, PaymentService
from realevr.services.property import PropertyService
from realevr.services.tour import TourService
from realevr.storage.base import BaseStorage
from realevr.utils.exceptions import (
    UnauthorizedError,
    InvalidTokenError,
    InsufficientPermissionsError
)


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_storage(request: Request) -> BaseStorage:
    """Storage backend created by the application lifespan."""
    return request.app.state.storage


def get_flutterwave_client(request: Request) -> Optional[FlutterwaveClient]:
    """Flutterwave client, or None when no secret key is configured."""
    return getattr(request.app.state, "flutterwave", None)


async def get_auth_service(storage: BaseStorage = Depends(get_storage)) -> AuthService:
    return AuthService(storage)


async def get_property_service(storage: BaseStorage = Depends(get_storage)) -> PropertyService:
    return PropertyService(storage, settings.upload_path)


async def get_tour_service(storage: BaseStorage = Depends(get_storage)) -> TourService:
    return TourService(
        storage,
        settings.tour_upload_path,
        settings.incoming_upload_path,
        max_size=settings.max_tour_size,
        chunk_size=settings.upload_chunk_size
    )


async def get_payment_service(
    storage: BaseStorage = Depends(get_storage),
    client: Optional[FlutterwaveClient] = Depends(get_flutterwave_client),
    auth_service: AuthService = Depends(get_auth_service)
) -> PaymentService:
    return PaymentService(storage, client, auth_service)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserInDB:
    """
    Get current authenticated user from JWT token.

    Raises:
        UnauthorizedError: If no token provided
        InvalidTokenError: If token is invalid or expired
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    return await auth_service.get_current_user(credentials.credentials)


def require_roles(*roles: UserRole):
    """
    Create a dependency that requires one of the given roles.

    Args:
        roles: Accepted user roles

    Returns:
        Dependency function
    """
    async def role_dependency(current_user: UserInDB = Depends(get_current_user)) -> UserInDB:
        if current_user.role not in roles:
            raise InsufficientPermissionsError("access this resource")
        return current_user

    return role_dependency


# Admin or property manager: property, upload and tour management
get_current_manager_user = require_roles(UserRole.ADMIN, UserRole.PROPERTY_MANAGER)

# Admin only: user and catalog management
get_current_admin_user = require_roles(UserRole.ADMIN)


async def get_optional_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[UserInDB]:
    """
    Get current user if a valid token is provided, otherwise None.
    """
    if not credentials:
        return None

    try:
        return await auth_service.get_current_user(credentials.credentials)
    except InvalidTokenError:
        return None
