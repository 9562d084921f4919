"""
Auth helpers and API exceptions. FastAPI dependencies live in realevr.utils.dependencies,
which imports the services and is therefore not re-exported here.
"""

from .auth import create_access_token, verify_token, hash_password, verify_password, TokenPayload
from .exceptions import (
    APIException,
    BadRequestError,
    ValidationError,
    NotFoundError,
    PropertyNotFoundError,
    ConflictError,
    UnauthorizedError,
    InvalidTokenError,
    ForbiddenError,
    FileUploadError,
    TourExtractionError,
    PaymentGatewayError,
)

__all__ = [
    "create_access_token",
    "verify_token",
    "hash_password",
    "verify_password",
    "TokenPayload",
    "APIException",
    "BadRequestError",
    "ValidationError",
    "NotFoundError",
    "PropertyNotFoundError",
    "ConflictError",
    "UnauthorizedError",
    "InvalidTokenError",
    "ForbiddenError",
    "FileUploadError",
    "TourExtractionError",
    "PaymentGatewayError",
]
