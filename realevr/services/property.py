"""
Property service for listing queries, admin CRUD and view tracking.
Deleting a property also removes its uploaded image and extracted tour.
"""

from pathlib import Path
from typing import List
from starlette.concurrency import run_in_threadpool
from realevr.models.property import PropertyCategory
from realevr.schemas.property import PropertyCreate, PropertyUpdate, PropertyResponse, PropertyFilter
from realevr.storage.base import BaseStorage
from realevr.services.tour import tour_directory_name
from realevr.utils.exceptions import BadRequestError, PropertyNotFoundError
from realevr.utils.file_utils import FileStorage
import logging

logger = logging.getLogger(__name__)

IMAGES_URL_PREFIX = "/uploads/images/"


class PropertyService:
    """
    Business logic on top of the storage backend.
    """

    def __init__(self, storage: BaseStorage, upload_dir: Path):
        self.storage = storage
        self.upload_dir = Path(upload_dir)
        self.images = FileStorage(self.upload_dir / "images")

    async def list_properties(self) -> List[PropertyResponse]:
        return await self.storage.get_all_properties()

    async def get_featured(self) -> List[PropertyResponse]:
        return await self.storage.get_featured_properties()

    async def get_popular(self, limit: int = 10) -> List[PropertyResponse]:
        return await self.storage.get_popular_properties(limit)

    async def get_recent(self, limit: int = 10) -> List[PropertyResponse]:
        return await self.storage.get_recent_properties(limit)

    async def get_by_category(self, category: str) -> List[PropertyResponse]:
        """
        Properties in one listing category.

        Raises:
            BadRequestError: If the category is unknown
        """
        try:
            parsed = PropertyCategory(category)
        except ValueError:
            allowed = ", ".join(c.value for c in PropertyCategory)
            raise BadRequestError(f"Invalid category '{category}'. Must be one of: {allowed}")
        return await self.storage.get_properties_by_category(parsed)

    async def search(self, query: str) -> List[PropertyResponse]:
        return await self.storage.search_properties(query)

    async def filter(self, filters: PropertyFilter) -> List[PropertyResponse]:
        return await self.storage.filter_properties(filters)

    async def get_property(self, property_id: int) -> PropertyResponse:
        """
        Raises:
            PropertyNotFoundError: If the property doesn't exist
        """
        prop = await self.storage.get_property(property_id)
        if prop is None:
            raise PropertyNotFoundError(property_id)
        return prop

    async def record_view(self, property_id: int) -> int:
        """
        Count one view of a property.

        Returns:
            The new view count

        Raises:
            PropertyNotFoundError: If the property doesn't exist
        """
        count = await self.storage.increment_property_views(property_id)
        if count is None:
            raise PropertyNotFoundError(property_id)
        return count

    async def create_property(self, data: PropertyCreate) -> PropertyResponse:
        prop = await self.storage.create_property(data)
        logger.info(f"Property created: {prop.title} (ID: {prop.id})")
        return prop

    async def update_property(self, property_id: int, data: PropertyUpdate) -> PropertyResponse:
        """
        Apply a partial update.

        Raises:
            BadRequestError: If no fields were provided
            PropertyNotFoundError: If the property doesn't exist
        """
        changes = data.changes()
        if not changes:
            raise BadRequestError("No fields provided for update")

        prop = await self.storage.update_property(property_id, changes)
        if prop is None:
            raise PropertyNotFoundError(property_id)

        logger.info(f"Property updated: {prop.id} ({', '.join(sorted(changes))})")
        return prop

    async def delete_property(self, property_id: int) -> None:
        """
        Delete a property with its uploaded image and extracted tour.

        Raises:
            PropertyNotFoundError: If the property doesn't exist
        """
        prop = await self.storage.get_property(property_id)
        if prop is None or not await self.storage.delete_property(property_id):
            raise PropertyNotFoundError(property_id)

        await run_in_threadpool(self._remove_files, prop)
        logger.info(f"Property deleted: {property_id}")

    def _remove_files(self, prop: PropertyResponse) -> None:
        # Failing to clean up files never undoes the delete
        try:
            image = self.images.resolve_public_path(prop.image_url, IMAGES_URL_PREFIX)
            if image is not None:
                FileStorage.delete_file(image)
            FileStorage.delete_directory(self.upload_dir / "tours" / tour_directory_name(prop.id))
        except OSError as e:
            logger.error(f"Failed to remove files of property {prop.id}: {e}")
