"""
Authentication API endpoints: registration, login, logout and current user.
Tokens are stateless JWTs sent as `Authorization: Bearer <token>`.
"""

from fastapi import APIRouter, Depends, Response, status

from realevr.schemas.auth import LoginRequest, RegisterRequest, AuthResponse
from realevr.schemas.user import UserInDB, UserResponse
from realevr.services.auth import AuthService
from realevr.utils.dependencies import get_auth_service, get_current_user


router = APIRouter(tags=["Authentication"])


def _auth_response(user: UserInDB, token: str) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.model_validate(user.model_dump()),
        access_token=token,
        expires_in=AuthService.token_lifetime_seconds()
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account"
)
async def register(
    data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Create a `user`-role account and sign it in.

    Raises:
        DuplicateResourceError: If the username is taken
    """
    user, token = await auth_service.register(data)
    return _auth_response(user, token)


@router.post("/login", response_model=AuthResponse, summary="User login")
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Raises:
        InvalidCredentialsError: If credentials are invalid
    """
    user, token = await auth_service.login(login_data.username, login_data.password)
    return _auth_response(user, token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, summary="User logout")
async def logout() -> Response:
    # Tokens are stateless; the client discards its copy
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/user", response_model=UserResponse, summary="Current user")
async def current_user(user: UserInDB = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(user.model_dump())
