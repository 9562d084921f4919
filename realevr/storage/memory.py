"""
In-memory storage persisted to a flat JSON file.
Every mutation except view counting is written immediately; view counts are
written by the autosave task or on shutdown.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import asyncio
import json
import logging
import os

import aiofiles
from pydantic import ValidationError as PydanticValidationError

from realevr.schemas.property import PropertyCreate, PropertyResponse
from realevr.schemas.user import UserCreate, UserInDB
from realevr.schemas.catalog import (
    AmenityCreate,
    AmenityResponse,
    PropertyTypeCreate,
    PropertyTypeResponse
)
from realevr.storage.base import BaseStorage
from realevr.storage.seed import seed_storage

logger = logging.getLogger(__name__)

# Collection name in the JSON file -> record schema
_COLLECTIONS = {
    "users": UserInDB,
    "properties": PropertyResponse,
    "amenities": AmenityResponse,
    "propertyTypes": PropertyTypeResponse,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemStorage(BaseStorage):
    """
    Dict-backed store with one incrementing id counter per collection.

    Args:
        data_file: JSON file to restore from and write to. None keeps data in memory only.
        seed: Load the sample catalog and listings when no file exists
    """

    def __init__(self, data_file: Optional[Union[str, Path]] = None, seed: bool = True):
        self.data_file = Path(data_file) if data_file else None
        self.seed = seed
        self._records: Dict[str, Dict[int, Any]] = {name: {} for name in _COLLECTIONS}
        self._next_ids: Dict[str, int] = {name: 1 for name in _COLLECTIONS}
        self._lock = asyncio.Lock()
        self._dirty = False
        self._batching = False

    # Lifecycle

    async def load(self) -> None:
        if self.data_file is not None and self.data_file.exists():
            try:
                async with aiofiles.open(self.data_file, "r", encoding="utf-8") as f:
                    raw = await f.read()
                self._restore(json.loads(raw))
                logger.info(
                    f"Restored {len(self._records['properties'])} properties and "
                    f"{len(self._records['users'])} users from {self.data_file}"
                )
                return
            except (ValueError, KeyError, TypeError, PydanticValidationError) as e:
                corrupt = self.data_file.with_name(
                    f"{self.data_file.name}.corrupt-{int(_utcnow().timestamp())}"
                )
                os.replace(self.data_file, corrupt)
                logger.error(f"Data file {self.data_file} is unreadable ({e}); moved to {corrupt}")
                self._reset()

        if self.seed:
            self._batching = True
            try:
                await seed_storage(self)
            finally:
                self._batching = False
        await self.save()

    async def flush(self) -> None:
        if self._dirty:
            await self.save()

    async def save(self) -> None:
        """Write the whole store atomically: temporary file, then rename."""
        if self.data_file is None:
            self._dirty = False
            return

        async with self._lock:
            payload = json.dumps(self._snapshot(), indent=2)
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.data_file.with_name(self.data_file.name + ".tmp")
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            os.replace(tmp_path, self.data_file)
            self._dirty = False
        logger.debug(f"Saved data to {self.data_file}")

    def _snapshot(self) -> Dict[str, Any]:
        data = {
            name: [record.to_json_dict() for record in records.values()]
            for name, records in self._records.items()
        }
        data["nextIds"] = dict(self._next_ids)
        return data

    def _restore(self, data: Dict[str, Any]) -> None:
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        next_ids = data.get("nextIds") or {}
        if not isinstance(next_ids, dict):
            raise ValueError("nextIds must be an object")
        self._reset()
        for name, schema in _COLLECTIONS.items():
            records = {}
            for item in data.get(name, []):
                record = schema.model_validate(item)
                records[record.id] = record
            self._records[name] = records
            highest = max(records, default=0) + 1
            # Never hand out an id that is already taken
            self._next_ids[name] = max(int(next_ids.get(name, highest)), highest)

    def _reset(self) -> None:
        self._records = {name: {} for name in _COLLECTIONS}
        self._next_ids = {name: 1 for name in _COLLECTIONS}

    def _allocate_id(self, collection: str) -> int:
        new_id = self._next_ids[collection]
        self._next_ids[collection] = new_id + 1
        return new_id

    async def _persist(self) -> None:
        self._dirty = True
        if not self._batching:
            await self.save()

    # User methods

    async def get_user(self, user_id: int) -> Optional[UserInDB]:
        return self._records["users"].get(user_id)

    async def get_user_by_username(self, username: str) -> Optional[UserInDB]:
        for user in self._records["users"].values():
            if user.username == username:
                return user
        return None

    async def list_users(self) -> List[UserInDB]:
        return list(self._records["users"].values())

    async def create_user(self, user: UserCreate) -> UserInDB:
        record = UserInDB(
            id=self._allocate_id("users"),
            created_at=_utcnow(),
            **user.model_dump()
        )
        self._records["users"][record.id] = record
        await self._persist()
        return record

    async def update_user(self, user_id: int, changes: Dict[str, Any]) -> Optional[UserInDB]:
        existing = self._records["users"].get(user_id)
        if existing is None:
            return None
        updated = UserInDB.model_validate({**existing.model_dump(), **changes})
        self._records["users"][user_id] = updated
        await self._persist()
        return updated

    # Property methods

    async def get_all_properties(self) -> List[PropertyResponse]:
        return list(self._records["properties"].values())

    async def get_property(self, property_id: int) -> Optional[PropertyResponse]:
        return self._records["properties"].get(property_id)

    async def create_property(self, prop: PropertyCreate) -> PropertyResponse:
        record = PropertyResponse(
            id=self._allocate_id("properties"),
            view_count=0,
            created_at=_utcnow(),
            **prop.model_dump()
        )
        self._records["properties"][record.id] = record
        await self._persist()
        return record

    async def update_property(self, property_id: int, changes: Dict[str, Any]) -> Optional[PropertyResponse]:
        existing = self._records["properties"].get(property_id)
        if existing is None:
            return None
        # id, view count and creation time are owned by the store
        changes = {k: v for k, v in changes.items() if k not in ("id", "view_count", "created_at")}
        updated = PropertyResponse.model_validate({**existing.model_dump(), **changes})
        self._records["properties"][property_id] = updated
        await self._persist()
        return updated

    async def delete_property(self, property_id: int) -> bool:
        if self._records["properties"].pop(property_id, None) is None:
            return False
        await self._persist()
        return True

    async def increment_property_views(self, property_id: int) -> Optional[int]:
        existing = self._records["properties"].get(property_id)
        if existing is None:
            return None
        updated = existing.model_copy(update={"view_count": existing.view_count + 1})
        self._records["properties"][property_id] = updated
        self._dirty = True
        return updated.view_count

    # Amenity methods

    async def get_all_amenities(self) -> List[AmenityResponse]:
        return list(self._records["amenities"].values())

    async def get_amenity(self, amenity_id: int) -> Optional[AmenityResponse]:
        return self._records["amenities"].get(amenity_id)

    async def create_amenity(self, amenity: AmenityCreate) -> AmenityResponse:
        record = AmenityResponse(id=self._allocate_id("amenities"), **amenity.model_dump())
        self._records["amenities"][record.id] = record
        await self._persist()
        return record

    # Property type methods

    async def get_all_property_types(self) -> List[PropertyTypeResponse]:
        return list(self._records["propertyTypes"].values())

    async def get_property_type(self, type_id: int) -> Optional[PropertyTypeResponse]:
        return self._records["propertyTypes"].get(type_id)

    async def create_property_type(self, property_type: PropertyTypeCreate) -> PropertyTypeResponse:
        record = PropertyTypeResponse(id=self._allocate_id("propertyTypes"), **property_type.model_dump())
        self._records["propertyTypes"][record.id] = record
        await self._persist()
        return record
