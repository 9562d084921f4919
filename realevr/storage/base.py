"""
Storage interface shared by the JSON file store and the database store.
Query helpers that only need the full property list are implemented here once.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import asyncio
import logging

from realevr.models.property import PropertyCategory
from realevr.schemas.property import PropertyCreate, PropertyResponse, PropertyFilter
from realevr.schemas.user import UserCreate, UserInDB
from realevr.schemas.catalog import (
    AmenityCreate,
    AmenityResponse,
    PropertyTypeCreate,
    PropertyTypeResponse
)

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _created_key(prop: PropertyResponse):
    created = prop.created_at or _EPOCH
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created, prop.id


class BaseStorage(ABC):
    """
    Abstract storage backend.
    Records are returned as pydantic schemas regardless of how they are persisted.
    """

    # Lifecycle

    async def load(self) -> None:
        """Prepare the backend: restore persisted state, create tables, seed data."""

    async def flush(self) -> None:
        """Write any pending changes."""

    async def close(self) -> None:
        """Flush and release resources."""
        await self.flush()

    # User methods

    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[UserInDB]:
        ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[UserInDB]:
        ...

    @abstractmethod
    async def list_users(self) -> List[UserInDB]:
        ...

    @abstractmethod
    async def create_user(self, user: UserCreate) -> UserInDB:
        ...

    @abstractmethod
    async def update_user(self, user_id: int, changes: Dict[str, Any]) -> Optional[UserInDB]:
        ...

    # Property methods

    @abstractmethod
    async def get_all_properties(self) -> List[PropertyResponse]:
        ...

    @abstractmethod
    async def get_property(self, property_id: int) -> Optional[PropertyResponse]:
        ...

    @abstractmethod
    async def create_property(self, prop: PropertyCreate) -> PropertyResponse:
        ...

    @abstractmethod
    async def update_property(self, property_id: int, changes: Dict[str, Any]) -> Optional[PropertyResponse]:
        ...

    @abstractmethod
    async def delete_property(self, property_id: int) -> bool:
        ...

    @abstractmethod
    async def increment_property_views(self, property_id: int) -> Optional[int]:
        """Record one view and return the new count, or None if the property is missing."""

    async def get_featured_properties(self) -> List[PropertyResponse]:
        return [p for p in await self.get_all_properties() if p.is_featured]

    async def get_properties_by_category(self, category: PropertyCategory) -> List[PropertyResponse]:
        return [p for p in await self.get_all_properties() if p.category == category]

    async def search_properties(self, query: str) -> List[PropertyResponse]:
        """Case-insensitive substring match on title, location and property type."""
        needle = (query or "").strip().lower()
        properties = await self.get_all_properties()
        if not needle:
            return properties
        return [
            p for p in properties
            if needle in p.title.lower()
            or needle in p.location.lower()
            or needle in p.property_type.lower()
        ]

    async def filter_properties(self, filters: PropertyFilter) -> List[PropertyResponse]:
        return [p for p in await self.get_all_properties() if filters.matches(p)]

    async def get_popular_properties(self, limit: int = 10) -> List[PropertyResponse]:
        """Most viewed first; ties keep listing order."""
        properties = await self.get_all_properties()
        properties.sort(key=lambda p: (-p.view_count, p.id))
        return properties[:limit]

    async def get_recent_properties(self, limit: int = 10) -> List[PropertyResponse]:
        """Newest first."""
        properties = await self.get_all_properties()
        properties.sort(key=_created_key, reverse=True)
        return properties[:limit]

    # Amenity methods

    @abstractmethod
    async def get_all_amenities(self) -> List[AmenityResponse]:
        ...

    @abstractmethod
    async def get_amenity(self, amenity_id: int) -> Optional[AmenityResponse]:
        ...

    @abstractmethod
    async def create_amenity(self, amenity: AmenityCreate) -> AmenityResponse:
        ...

    # Property type methods

    @abstractmethod
    async def get_all_property_types(self) -> List[PropertyTypeResponse]:
        ...

    @abstractmethod
    async def get_property_type(self, type_id: int) -> Optional[PropertyTypeResponse]:
        ...

    @abstractmethod
    async def create_property_type(self, property_type: PropertyTypeCreate) -> PropertyTypeResponse:
        ...


async def run_autosave(storage: BaseStorage, interval: float) -> None:
    """
    Periodically flush pending changes until cancelled.

    Args:
        storage: Storage backend to flush
        interval: Seconds between flushes
    """
    while True:
        await asyncio.sleep(interval)
        try:
            await storage.flush()
        except OSError as e:
            logger.error(f"Autosave failed: {e}")
