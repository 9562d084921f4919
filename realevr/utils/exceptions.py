"""
API exceptions for the RealEVR Listings API.
Each class fixes an HTTP status and an error code; the message is per raise.
"""

from typing import Any, Dict, List, Optional
from fastapi import HTTPException, status


class APIException(HTTPException):
    """
    Base class for errors answered with the structured error body.

    Subclasses set `status_code`, `error_code` and `default_detail`.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "API_ERROR"
    default_detail = "Request failed"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, detail: Optional[str] = None, error_code: Optional[str] = None):
        super().__init__(
            status_code=type(self).status_code,
            detail=detail or self.default_detail,
            headers=type(self).headers
        )
        if error_code:
            self.error_code = error_code


# Client errors
class BadRequestError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "BAD_REQUEST"
    default_detail = "Bad request"


class ValidationError(BadRequestError):
    """A 400 carrying per-field problems in `details`."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, detail: str, field_errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(detail)
        self.field_errors = field_errors or []


class NotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Optional[Any] = None):
        detail = f"{resource} not found"
        if resource_id is not None:
            detail = f"{detail} with ID: {resource_id}"
        super().__init__(detail)


class PropertyNotFoundError(NotFoundError):
    def __init__(self, property_id: Any):
        super().__init__("Property", property_id)


class ConflictError(APIException):
    status_code = status.HTTP_409_CONFLICT
    error_code = "CONFLICT"
    default_detail = "Resource already exists"


class DuplicateResourceError(ConflictError):
    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} with identifier '{identifier}' already exists")


# Authentication and authorization
class UnauthorizedError(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHORIZED"
    default_detail = "Authentication required"
    headers = {"WWW-Authenticate": "Bearer"}


class InvalidCredentialsError(UnauthorizedError):
    default_detail = "Invalid username or password"


class InvalidTokenError(UnauthorizedError):
    """Token is malformed, expired, or names a user that no longer exists."""

    default_detail = "Invalid token"


class ForbiddenError(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"
    default_detail = "Access forbidden"


class InsufficientPermissionsError(ForbiddenError):
    def __init__(self, action: str):
        super().__init__(f"Insufficient permissions to {action}")


# Uploads
class FileUploadError(BadRequestError):
    error_code = "UPLOAD_ERROR"
    default_detail = "File upload failed"


class UnsupportedFileTypeError(FileUploadError):
    default_detail = "Unsupported file type"


class FileSizeExceededError(FileUploadError):
    default_detail = "File too large"


class TourExtractionError(FileUploadError):
    """Tour archive is unreadable, unsafe, or has no entry page."""

    default_detail = "Tour archive could not be extracted"


# Payments
class PaymentGatewayError(APIException):
    """Flutterwave rejected the request or could not be reached."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "PAYMENT_GATEWAY_ERROR"
    default_detail = "Payment gateway error"


class ServiceUnavailableError(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "SERVICE_UNAVAILABLE"
    default_detail = "Service temporarily unavailable"


class PaymentNotConfiguredError(ServiceUnavailableError):
    default_detail = "Payment processing is not configured"
