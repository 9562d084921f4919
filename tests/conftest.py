"""
Test configuration and fixtures for the RealEVR Listings API.
Provides an isolated upload root, in-memory storage, users with tokens and test data factories.
"""

import asyncio
import io
import os
import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import Dict, Iterable, Optional

# Configure the application before it is imported
_TEST_ROOT = Path(tempfile.mkdtemp(prefix="realevr-tests-"))
os.environ["ENVIRONMENT"] = "testing"
os.environ["UPLOAD_DIR"] = str(_TEST_ROOT / "uploads")
os.environ["DATA_FILE"] = str(_TEST_ROOT / "data.json")
os.environ["DATABASE_URL"] = ""
os.environ["FLUTTERWAVE_SECRET_KEY"] = ""
os.environ["CLIENT_DIST_DIR"] = ""

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from realevr.config import settings
from realevr.main import app, create_upload_directories
from realevr.models.user import UserRole
from realevr.schemas.user import UserCreate, UserInDB
from realevr.storage.memory import MemStorage
from realevr.utils.auth import create_access_token, hash_password
from realevr.utils.dependencies import get_storage

TEST_PASSWORD = "secret123"


@pytest.fixture(scope="session", autouse=True)
def test_root():
    yield _TEST_ROOT
    shutil.rmtree(_TEST_ROOT, ignore_errors=True)


@pytest.fixture(autouse=True)
def clean_uploads():
    """Every test starts with empty upload directories."""
    shutil.rmtree(settings.upload_path, ignore_errors=True)
    create_upload_directories()
    yield


@pytest.fixture
def storage() -> MemStorage:
    """Seeded in-memory store that never touches the data file."""
    store = MemStorage(None, seed=True)
    asyncio.run(store.load())
    return store


@pytest.fixture
def client(storage: MemStorage):
    """Test client wired to the in-memory store."""
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create(
        storage: MemStorage,
        username: str,
        role: UserRole = UserRole.USER,
        password: str = TEST_PASSWORD
    ) -> UserInDB:
        return asyncio.run(storage.create_user(UserCreate(
            username=username,
            password=hash_password(password),
            email=f"{username}@example.com",
            full_name=username.title(),
            role=role
        )))

    @staticmethod
    def auth_headers(user: UserInDB) -> Dict[str, str]:
        token = create_access_token(user_id=user.id, username=user.username, role=user.role)
        return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_user(storage: MemStorage) -> UserInDB:
    return UserFactory.create(storage, "admin", UserRole.ADMIN)


@pytest.fixture
def manager_user(storage: MemStorage) -> UserInDB:
    return UserFactory.create(storage, "manager", UserRole.PROPERTY_MANAGER)


@pytest.fixture
def regular_user(storage: MemStorage) -> UserInDB:
    return UserFactory.create(storage, "visitor", UserRole.USER)


@pytest.fixture
def admin_headers(admin_user: UserInDB) -> Dict[str, str]:
    return UserFactory.auth_headers(admin_user)


@pytest.fixture
def manager_headers(manager_user: UserInDB) -> Dict[str, str]:
    return UserFactory.auth_headers(manager_user)


@pytest.fixture
def user_headers(regular_user: UserInDB) -> Dict[str, str]:
    return UserFactory.auth_headers(regular_user)


class PropertyFactory:
    """Factory for property request bodies."""

    @staticmethod
    def create_property_data(**overrides) -> dict:
        data = {
            "title": "Kololo Hillside Apartment",
            "location": "Kololo, Kampala",
            "price": 1500000,
            "currency": "UGX",
            "description": "Bright two bedroom apartment with a balcony and city views.",
            "bedrooms": 2,
            "bathrooms": 1.5,
            "squareFeet": 950,
            "imageUrl": "",
            "propertyType": "Apartments",
            "category": "rental_units",
            "amenities": ["High-Speed Internet", "Pet Friendly"],
        }
        data.update(overrides)
        return data


def create_test_image(width: int = 64, height: int = 48, format: str = "PNG") -> bytes:
    """Create a test image in memory."""
    img = Image.new("RGB", (width, height), color="red")
    img_bytes = io.BytesIO()
    img.save(img_bytes, format=format)
    return img_bytes.getvalue()


def create_test_zip(files: Iterable[str], contents: Optional[Dict[str, bytes]] = None) -> bytes:
    """Create a zip archive in memory with the given member names."""
    contents = contents or {}
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name in files:
            archive.writestr(name, contents.get(name, b"<html><body>tour</body></html>"))
    return buffer.getvalue()
