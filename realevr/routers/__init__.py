"""
API routers for the RealEVR Listings API.
"""

from . import auth, catalog, payments, properties, uploads, users

__all__ = ["auth", "catalog", "payments", "properties", "uploads", "users"]
