"""
Relational storage backend using async SQLAlchemy.
Selected at startup when DATABASE_URL is configured.
"""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import select, update, delete, func, and_, or_
from sqlalchemy.ext.asyncio import AsyncEngine

from realevr.database import create_engine, create_session_factory, wait_for_database, create_tables
from realevr.models import User, Property, Amenity, PropertyType, PropertyCategory
from realevr.schemas.property import PropertyCreate, PropertyResponse, PropertyFilter
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

_STORE_OWNED = ("id", "view_count", "created_at")


class DatabaseStorage(BaseStorage):
    """
    Storage backed by SQLAlchemy models. Each operation runs in its own session.
    """

    def __init__(
        self,
        database_url: str,
        seed: bool = True,
        connect_retries: int = 5,
        connect_initial_delay: float = 1.0,
        echo: bool = False,
        engine: Optional[AsyncEngine] = None
    ):
        self.engine = engine or create_engine(database_url, echo=echo)
        self.session_factory = create_session_factory(self.engine)
        self.seed = seed
        self.connect_retries = connect_retries
        self.connect_initial_delay = connect_initial_delay

    async def load(self) -> None:
        await wait_for_database(self.engine, self.connect_retries, self.connect_initial_delay)
        await create_tables(self.engine)

        async with self.session_factory() as session:
            count = (await session.execute(select(func.count(Property.id)))).scalar()

        if count == 0 and self.seed:
            logger.info("Database is empty, loading sample data")
            await seed_storage(self)

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("Database connections closed")

    async def _add(self, obj):
        async with self.session_factory() as session:
            try:
                session.add(obj)
                await session.commit()
                await session.refresh(obj)
                return obj
            except Exception as e:
                await session.rollback()
                logger.error(f"Failed to create {obj.__class__.__name__}: {e}")
                raise

    async def _scalars(self, query) -> list:
        async with self.session_factory() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def _scalar(self, query):
        async with self.session_factory() as session:
            result = await session.execute(query)
            return result.scalar_one_or_none()

    async def _update(self, model, record_id: int, changes: Dict[str, Any]):
        async with self.session_factory() as session:
            try:
                if changes:
                    result = await session.execute(
                        update(model).where(model.id == record_id).values(**changes)
                    )
                    if result.rowcount == 0:
                        return None
                    await session.commit()
                return (
                    await session.execute(select(model).where(model.id == record_id))
                ).scalar_one_or_none()
            except Exception as e:
                await session.rollback()
                logger.error(f"Failed to update {model.__name__} {record_id}: {e}")
                raise

    # User methods

    async def get_user(self, user_id: int) -> Optional[UserInDB]:
        user = await self._scalar(select(User).where(User.id == user_id))
        return UserInDB.model_validate(user) if user else None

    async def get_user_by_username(self, username: str) -> Optional[UserInDB]:
        user = await self._scalar(select(User).where(User.username == username))
        return UserInDB.model_validate(user) if user else None

    async def list_users(self) -> List[UserInDB]:
        users = await self._scalars(select(User).order_by(User.id))
        return [UserInDB.model_validate(u) for u in users]

    async def create_user(self, user: UserCreate) -> UserInDB:
        created = await self._add(User(**user.model_dump()))
        return UserInDB.model_validate(created)

    async def update_user(self, user_id: int, changes: Dict[str, Any]) -> Optional[UserInDB]:
        changes = {k: v for k, v in changes.items() if k not in ("id", "created_at")}
        user = await self._update(User, user_id, changes)
        return UserInDB.model_validate(user) if user else None

    # Property methods

    async def get_all_properties(self) -> List[PropertyResponse]:
        return self._to_responses(await self._scalars(select(Property).order_by(Property.id)))

    async def get_property(self, property_id: int) -> Optional[PropertyResponse]:
        prop = await self._scalar(select(Property).where(Property.id == property_id))
        return PropertyResponse.model_validate(prop) if prop else None

    async def get_featured_properties(self) -> List[PropertyResponse]:
        query = select(Property).where(Property.is_featured.is_(True)).order_by(Property.id)
        return self._to_responses(await self._scalars(query))

    async def get_properties_by_category(self, category: PropertyCategory) -> List[PropertyResponse]:
        query = select(Property).where(Property.category == category).order_by(Property.id)
        return self._to_responses(await self._scalars(query))

    async def search_properties(self, query: str) -> List[PropertyResponse]:
        needle = (query or "").strip()
        if not needle:
            return await self.get_all_properties()
        stmt = (
            select(Property)
            .where(
                or_(
                    Property.title.icontains(needle, autoescape=True),
                    Property.location.icontains(needle, autoescape=True),
                    Property.property_type.icontains(needle, autoescape=True),
                )
            )
            .order_by(Property.id)
        )
        return self._to_responses(await self._scalars(stmt))

    async def filter_properties(self, filters: PropertyFilter) -> List[PropertyResponse]:
        conditions = []
        if filters.property_type is not None:
            conditions.append(Property.property_type == filters.property_type)
        if filters.category is not None:
            conditions.append(Property.category == filters.category)
        if filters.min_price is not None:
            conditions.append(Property.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Property.price <= filters.max_price)
        if filters.bedrooms is not None:
            conditions.append(Property.bedrooms >= filters.bedrooms)
        if filters.bathrooms is not None:
            conditions.append(Property.bathrooms >= filters.bathrooms)
        if filters.has_tour is not None:
            conditions.append(Property.has_tour == filters.has_tour)

        stmt = select(Property).order_by(Property.id)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        properties = self._to_responses(await self._scalars(stmt))
        # JSON list containment is not portable across dialects
        if filters.amenities:
            properties = [p for p in properties if all(a in p.amenities for a in filters.amenities)]
        return properties

    async def get_popular_properties(self, limit: int = 10) -> List[PropertyResponse]:
        stmt = select(Property).order_by(Property.view_count.desc(), Property.id).limit(limit)
        return self._to_responses(await self._scalars(stmt))

    async def get_recent_properties(self, limit: int = 10) -> List[PropertyResponse]:
        stmt = select(Property).order_by(Property.created_at.desc(), Property.id.desc()).limit(limit)
        return self._to_responses(await self._scalars(stmt))

    async def create_property(self, prop: PropertyCreate) -> PropertyResponse:
        created = await self._add(Property(**prop.model_dump()))
        logger.info(f"Created property: {created.title} (ID: {created.id})")
        return PropertyResponse.model_validate(created)

    async def update_property(self, property_id: int, changes: Dict[str, Any]) -> Optional[PropertyResponse]:
        changes = {k: v for k, v in changes.items() if k not in _STORE_OWNED}
        prop = await self._update(Property, property_id, changes)
        return PropertyResponse.model_validate(prop) if prop else None

    async def delete_property(self, property_id: int) -> bool:
        async with self.session_factory() as session:
            try:
                result = await session.execute(delete(Property).where(Property.id == property_id))
                await session.commit()
                return result.rowcount > 0
            except Exception as e:
                await session.rollback()
                logger.error(f"Failed to delete property {property_id}: {e}")
                raise

    async def increment_property_views(self, property_id: int) -> Optional[int]:
        async with self.session_factory() as session:
            try:
                result = await session.execute(
                    update(Property)
                    .where(Property.id == property_id)
                    .values(view_count=Property.view_count + 1)
                )
                if result.rowcount == 0:
                    return None
                count = (
                    await session.execute(select(Property.view_count).where(Property.id == property_id))
                ).scalar_one()
                await session.commit()
                return count
            except Exception as e:
                await session.rollback()
                logger.error(f"Failed to record view for property {property_id}: {e}")
                raise

    @staticmethod
    def _to_responses(properties) -> List[PropertyResponse]:
        return [PropertyResponse.model_validate(p) for p in properties]

    # Amenity methods

    async def get_all_amenities(self) -> List[AmenityResponse]:
        amenities = await self._scalars(select(Amenity).order_by(Amenity.id))
        return [AmenityResponse.model_validate(a) for a in amenities]

    async def get_amenity(self, amenity_id: int) -> Optional[AmenityResponse]:
        amenity = await self._scalar(select(Amenity).where(Amenity.id == amenity_id))
        return AmenityResponse.model_validate(amenity) if amenity else None

    async def create_amenity(self, amenity: AmenityCreate) -> AmenityResponse:
        created = await self._add(Amenity(**amenity.model_dump()))
        return AmenityResponse.model_validate(created)

    # Property type methods

    async def get_all_property_types(self) -> List[PropertyTypeResponse]:
        types = await self._scalars(select(PropertyType).order_by(PropertyType.id))
        return [PropertyTypeResponse.model_validate(t) for t in types]

    async def get_property_type(self, type_id: int) -> Optional[PropertyTypeResponse]:
        property_type = await self._scalar(select(PropertyType).where(PropertyType.id == type_id))
        return PropertyTypeResponse.model_validate(property_type) if property_type else None

    async def create_property_type(self, property_type: PropertyTypeCreate) -> PropertyTypeResponse:
        created = await self._add(PropertyType(**property_type.model_dump()))
        return PropertyTypeResponse.model_validate(created)
