"""
Database models for the relational storage backend.
Includes User, Property, Amenity and PropertyType tables.
"""

from realevr.models.user import User, UserRole, MembershipPlan
from realevr.models.property import Property, PropertyCategory
from realevr.models.catalog import Amenity, PropertyType

# Export all models for easy importing
__all__ = [
    "User",
    "UserRole",
    "MembershipPlan",
    "Property",
    "PropertyCategory",
    "Amenity",
    "PropertyType",
]
