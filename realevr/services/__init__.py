"""
Service layer for business logic implementation.
Contains services for authentication, properties, virtual tours, payments and error handling.
"""

from .auth import AuthService
from .property import PropertyService
from .tour import TourService
from .payment import PaymentService, FlutterwaveClient
from .error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "PropertyService",
    "TourService",
    "PaymentService",
    "FlutterwaveClient",
    "ErrorHandlerService"
]
