"""
Password hashing with passlib and stateless JWT access tokens with python-jose.

Access tokens carry the user id in `sub` along with the username and role, so a
request can be authorized without a session table.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError
from realevr.config import settings
from realevr.models.user import UserRole

MIN_PASSWORD_LENGTH = 6
ACCESS_TOKEN_TYPE = "access"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenPayload(BaseModel):
    """Claims read back from a verified access token."""

    user_id: int
    username: str
    role: UserRole
    exp: datetime


def create_access_token(
    user_id: int,
    username: str,
    role: UserRole,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Sign an access token for a user.

    The lifetime defaults to ACCESS_TOKEN_EXPIRE_MINUTES; pass expires_delta to override it.
    """
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {
        "sub": str(user_id),
        "username": username,
        "role": role.value,
        "type": ACCESS_TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> TokenPayload:
    """
    Check the signature and expiry of an access token and return its claims.

    Raises:
        ExpiredSignatureError: If the token has expired
        JWTError: If the token is malformed, tampered with or not an access token
    """
    claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    if claims.get("type") != ACCESS_TOKEN_TYPE:
        raise JWTError("Invalid token type")

    try:
        return TokenPayload(
            user_id=claims["sub"],
            username=claims["username"],
            role=claims["role"],
            exp=claims["exp"],
        )
    except (KeyError, ValidationError) as e:
        raise JWTError(f"Invalid token payload: {e}")


def hash_password(password: str) -> str:
    """
    Raises:
        ValueError: If the password is shorter than MIN_PASSWORD_LENGTH
    """
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)
