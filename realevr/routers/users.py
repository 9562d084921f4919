"""
User administration endpoints. All routes require the admin role.
"""

from fastapi import APIRouter, Depends, Path
from typing import List

from realevr.schemas.user import UserInDB, UserResponse, UserUpdate, RoleUpdate
from realevr.services.auth import AuthService
from realevr.utils.dependencies import get_auth_service, get_current_admin_user


router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserResponse], summary="List users")
async def list_users(
    current_user: UserInDB = Depends(get_current_admin_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> List[UserResponse]:
    return [UserResponse.model_validate(u.model_dump()) for u in await auth_service.list_users()]


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update user",
    description="Update role, verification, contact and membership fields"
)
async def update_user(
    data: UserUpdate,
    user_id: int = Path(..., description="User ID"),
    current_user: UserInDB = Depends(get_current_admin_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    user = await auth_service.update_user(user_id, data)
    return UserResponse.model_validate(user.model_dump())


@router.patch("/{user_id}/role", response_model=UserResponse, summary="Change user role")
async def update_user_role(
    data: RoleUpdate,
    user_id: int = Path(..., description="User ID"),
    current_user: UserInDB = Depends(get_current_admin_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    user = await auth_service.update_role(user_id, data.role)
    return UserResponse.model_validate(user.model_dump())
