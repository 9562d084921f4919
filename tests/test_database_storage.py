"""
Tests for the SQLAlchemy storage backend against an in-memory SQLite database.
"""

import pytest
from sqlalchemy.exc import OperationalError

from realevr.database import create_engine, wait_for_database
from realevr.models.property import PropertyCategory
from realevr.models.user import UserRole, MembershipPlan
from realevr.schemas.property import PropertyCreate, PropertyFilter
from realevr.schemas.user import UserCreate
from realevr.storage.database import DatabaseStorage
from realevr.storage.seed import SAMPLE_PROPERTIES

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def db_storage():
    store = DatabaseStorage(TEST_DATABASE_URL, seed=True, connect_retries=1)
    await store.load()
    yield store
    await store.close()


async def test_load_seeds_empty_database(db_storage: DatabaseStorage):
    properties = await db_storage.get_all_properties()
    assert [p.id for p in properties] == list(range(1, len(SAMPLE_PROPERTIES) + 1))
    assert len(await db_storage.get_all_amenities()) == 4
    assert len(await db_storage.get_all_property_types()) == 7


async def test_load_does_not_reseed(db_storage: DatabaseStorage):
    await db_storage.load()
    assert len(await db_storage.get_all_properties()) == len(SAMPLE_PROPERTIES)


async def test_round_trip_fields(db_storage: DatabaseStorage):
    prop = await db_storage.get_property(3)
    assert prop.title == "Skyline Penthouse"
    assert prop.bathrooms == 2.5
    assert prop.category == PropertyCategory.FOR_SALE
    assert prop.amenities == ["Pool Access", "Fitness Center", "Concierge"]
    assert prop.created_at is not None


async def test_search_is_case_insensitive(db_storage: DatabaseStorage):
    results = await db_storage.search_properties("miami")
    assert [p.title for p in results] == ["Marina Bay Condo"]


async def test_search_escapes_wildcards(db_storage: DatabaseStorage):
    assert await db_storage.search_properties("%") == []


async def test_filter_combines_sql_and_amenities(db_storage: DatabaseStorage):
    results = await db_storage.filter_properties(
        PropertyFilter(min_price=3000, amenities=["Fitness Center"])
    )
    assert {p.title for p in results} == {
        "La Rose Royal Apartments",
        "Skyline Penthouse",
        "Marina Bay Condo",
    }


async def test_filter_has_tour(db_storage: DatabaseStorage):
    results = await db_storage.filter_properties(PropertyFilter(has_tour=True))
    assert [p.id for p in results] == [1]


async def test_category_and_featured(db_storage: DatabaseStorage):
    bank_sales = await db_storage.get_properties_by_category(PropertyCategory.BANK_SALES)
    assert {p.title for p in bank_sales} == {"Harbor View Residence", "The Metropolitan"}
    assert [p.id for p in await db_storage.get_featured_properties()] == [1]


async def test_increment_views_and_popular(db_storage: DatabaseStorage):
    assert await db_storage.increment_property_views(4) == 1
    assert await db_storage.increment_property_views(4) == 2
    assert await db_storage.increment_property_views(6) == 1
    assert await db_storage.increment_property_views(999) is None

    popular = await db_storage.get_popular_properties(limit=3)
    assert [p.id for p in popular] == [4, 6, 1]


async def test_create_update_delete(db_storage: DatabaseStorage):
    created = await db_storage.create_property(PropertyCreate(
        title="Muyenga Villa",
        location="Muyenga, Kampala",
        price=4200,
        description="Spacious villa with lake views and a large garden.",
        bedrooms=5,
        bathrooms=4,
        square_feet=3800,
        property_type="Houses",
        category=PropertyCategory.FOR_SALE,
    ))
    assert created.id == len(SAMPLE_PROPERTIES) + 1

    recent = await db_storage.get_recent_properties(limit=1)
    assert recent[0].id == created.id

    updated = await db_storage.update_property(created.id, {"price": 4000, "view_count": 50})
    assert updated.price == 4000
    assert updated.view_count == 0

    assert await db_storage.delete_property(created.id) is True
    assert await db_storage.get_property(created.id) is None
    assert await db_storage.delete_property(created.id) is False


async def test_update_missing_property(db_storage: DatabaseStorage):
    assert await db_storage.update_property(999, {"price": 10}) is None


async def test_users(db_storage: DatabaseStorage):
    user = await db_storage.create_user(UserCreate(username="amara", password="hash"))
    assert user.role == UserRole.USER

    updated = await db_storage.update_user(user.id, {"membership_plan": MembershipPlan.PROFESSIONAL})
    assert updated.membership_plan == MembershipPlan.PROFESSIONAL
    assert (await db_storage.get_user_by_username("amara")).id == user.id
    assert [u.username for u in await db_storage.list_users()] == ["amara"]


async def test_wait_for_database_gives_up(tmp_path):
    # A directory cannot be opened as a database file
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path}")
    with pytest.raises(OperationalError):
        await wait_for_database(engine, retries=2, initial_delay=0)
    await engine.dispose()
