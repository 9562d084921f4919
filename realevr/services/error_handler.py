"""
Error responses for the whole application.

Every error leaves the API with the same body:

    {"message": ..., "code": ..., "requestId": ..., "timestamp": ..., "details": [...]}

`details` is only present for validation failures. Client errors are logged as
warnings; server errors are logged with their traceback.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional
import logging
import uuid

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from realevr.utils.exceptions import APIException, ValidationError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


class ErrorHandlerService:
    """
    Builds the structured error body and logs the error once.
    Every handler accepts the request optionally so it can be used outside a route.
    """

    @staticmethod
    def format_error_response(
        error_code: str,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Build the JSON-ready error body.

        Args:
            error_code: Machine-readable code such as NOT_FOUND
            message: Human-readable message
            details: Per-field problems, omitted when empty
            request_id: Id of the failing request; a fresh one is generated if missing
        """
        body = {
            "message": message,
            "code": error_code,
            "requestId": request_id or ErrorHandlerService._generate_request_id(),
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }
        if details:
            body["details"] = details
        return jsonable_encoder(body)

    @classmethod
    def _respond(
        cls,
        request: Optional[Request],
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        headers: Optional[Mapping[str, str]] = None,
        exc_info: Optional[BaseException] = None
    ) -> JSONResponse:
        request_id = cls._request_id(request)
        path = request.url.path if request is not None else None
        log = logger.error if status_code >= 500 else logger.warning
        log(
            f"[{request_id}] {status_code} {error_code} on {path}: {message}",
            extra={"request_id": request_id, "error_code": error_code, "path": path},
            exc_info=exc_info
        )
        return JSONResponse(
            status_code=status_code,
            content=cls.format_error_response(error_code, message, details, request_id),
            headers=dict(headers) if headers else None
        )

    @classmethod
    def handle_api_exception(cls, exception: APIException, request: Optional[Request] = None) -> JSONResponse:
        details = exception.field_errors if isinstance(exception, ValidationError) else None
        return cls._respond(
            request,
            exception.status_code,
            exception.error_code,
            exception.detail,
            details=details,
            headers=exception.headers
        )

    @classmethod
    def handle_validation_error(
        cls,
        exception: RequestValidationError,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Malformed input is a client error: answered with 400 and one detail per problem.
        """
        details = []
        for error in exception.errors():
            field = ".".join(str(part) for part in error["loc"] if part != "body")
            details.append({"field": field or None, "message": error["msg"], "type": error["type"]})

        first = details[0]["message"] if details else "Invalid request"
        return cls._respond(
            request,
            400,
            "VALIDATION_ERROR",
            f"Request validation failed: {first}",
            details=details
        )

    @classmethod
    def handle_database_error(cls, exception: SQLAlchemyError, request: Optional[Request] = None) -> JSONResponse:
        # Driver messages stay in the log
        if isinstance(exception, IntegrityError):
            return cls._respond(request, 409, "INTEGRITY_ERROR", "Data integrity constraint violation",
                                exc_info=exception)
        return cls._respond(request, 500, "DATABASE_ERROR", "Database operation failed", exc_info=exception)

    @classmethod
    def handle_http_exception(
        cls,
        exception: StarletteHTTPException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Framework errors such as unknown routes or unsupported methods."""
        return cls._respond(
            request,
            exception.status_code,
            f"HTTP_{exception.status_code}",
            str(exception.detail),
            headers=getattr(exception, "headers", None)
        )

    @classmethod
    def handle_unexpected_error(cls, exception: Exception, request: Optional[Request] = None) -> JSONResponse:
        """
        Answer an unhandled exception with a generic 500. The exception is logged
        here and not re-raised.
        """
        return cls._respond(request, 500, "INTERNAL_SERVER_ERROR", INTERNAL_ERROR_MESSAGE, exc_info=exception)

    @staticmethod
    def _request_id(request: Optional[Request]) -> str:
        """Id assigned by the request logging middleware, when there is one."""
        request_id = getattr(request.state, "request_id", None) if request is not None else None
        return request_id or ErrorHandlerService._generate_request_id()

    @staticmethod
    def _generate_request_id() -> str:
        return uuid.uuid4().hex[:8]
