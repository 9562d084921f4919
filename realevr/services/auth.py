"""
Authentication service for registration, login, token validation and user administration.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
from jose import JWTError, ExpiredSignatureError
from realevr.config import settings
from realevr.models.user import UserRole, MembershipPlan
from realevr.schemas.auth import RegisterRequest
from realevr.schemas.user import UserCreate, UserInDB, UserUpdate
from realevr.storage.base import BaseStorage
from realevr.utils.auth import create_access_token, verify_token, hash_password, verify_password
from realevr.utils.exceptions import (
    BadRequestError,
    DuplicateResourceError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError
)
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Handles user authentication flows, token management and role administration.
    """

    def __init__(self, storage: BaseStorage):
        self.storage = storage

    @staticmethod
    def create_token(user: UserInDB) -> str:
        return create_access_token(user_id=user.id, username=user.username, role=user.role)

    @staticmethod
    def token_lifetime_seconds() -> int:
        return settings.access_token_expire_minutes * 60

    async def register(self, data: RegisterRequest) -> Tuple[UserInDB, str]:
        """
        Create a `user`-role account and issue a token for it.

        Args:
            data: Validated registration form

        Returns:
            Tuple of (created user, access token)

        Raises:
            DuplicateResourceError: If the username is taken
        """
        if await self.storage.get_user_by_username(data.username):
            raise DuplicateResourceError("User", data.username)

        user = await self.storage.create_user(UserCreate(
            username=data.username,
            password=hash_password(data.password),
            email=data.email,
            full_name=data.full_name,
            role=UserRole.USER,
            membership_plan=data.membership_plan
        ))

        logger.info(f"User registered: {user.username} (ID: {user.id})")
        return user, self.create_token(user)

    async def authenticate_user(self, username: str, password: str) -> UserInDB:
        """
        Check credentials.

        Raises:
            InvalidCredentialsError: If the username is unknown or the password is wrong
        """
        user = await self.storage.get_user_by_username(username)
        if not user or not verify_password(password, user.password):
            logger.warning(f"Failed authentication attempt for username: {username}")
            raise InvalidCredentialsError()

        logger.info(f"User authenticated successfully: {user.username}")
        return user

    async def login(self, username: str, password: str) -> Tuple[UserInDB, str]:
        user = await self.authenticate_user(username, password)
        return user, self.create_token(user)

    async def get_current_user(self, token: str) -> UserInDB:
        """
        Resolve the user behind an access token.

        Raises:
            InvalidTokenError: If the token is invalid, expired or its user no longer exists
        """
        try:
            payload = verify_token(token)
        except ExpiredSignatureError:
            raise InvalidTokenError("Token has expired")
        except JWTError as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        user = await self.storage.get_user(payload.user_id)
        if user is None:
            raise InvalidTokenError("User no longer exists")
        return user

    async def list_users(self) -> List[UserInDB]:
        return await self.storage.list_users()

    async def update_user(self, user_id: int, update: UserUpdate) -> UserInDB:
        """
        Apply an admin update to a user.

        Raises:
            BadRequestError: If the body has no fields
            NotFoundError: If the user doesn't exist
        """
        changes = update.changes()
        if not changes:
            raise BadRequestError("No fields provided for update")
        return await self._apply(user_id, changes)

    async def update_role(self, user_id: int, role: UserRole) -> UserInDB:
        user = await self._apply(user_id, {"role": role})
        logger.info(f"Role of user {user.username} changed to {role.value}")
        return user

    async def activate_membership(
        self,
        user_id: int,
        plan: MembershipPlan,
        days: Optional[int] = None
    ) -> UserInDB:
        """Start a membership period today, replacing any current one."""
        start = datetime.now(timezone.utc)
        end = start + timedelta(days=days or settings.membership_duration_days)
        user = await self._apply(user_id, {
            "membership_plan": plan,
            "membership_start_date": start,
            "membership_end_date": end,
        })
        logger.info(f"Activated {plan.value} membership for user {user.username} until {end.date()}")
        return user

    async def ensure_bootstrap_admin(self, username: Optional[str], password: Optional[str]) -> Optional[UserInDB]:
        """
        Create the configured admin account when no user has that name.
        Returns the created user, or None when nothing was done.
        """
        if not username or not password:
            return None
        if await self.storage.get_user_by_username(username):
            return None

        user = await self.storage.create_user(UserCreate(
            username=username,
            password=hash_password(password),
            role=UserRole.ADMIN,
            is_verified=True
        ))
        logger.info(f"Created bootstrap admin account: {username}")
        return user

    async def _apply(self, user_id: int, changes: Dict[str, Any]) -> UserInDB:
        user = await self.storage.update_user(user_id, changes)
        if user is None:
            raise NotFoundError("User", user_id)
        return user
