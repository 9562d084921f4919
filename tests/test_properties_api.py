"""
API tests for property browsing, view counting and management.
"""

import pytest

from realevr.config import settings
from realevr.storage.seed import SAMPLE_PROPERTIES
from tests.conftest import PropertyFactory


class TestPublicListing:

    def test_list_properties(self, client):
        response = client.get("/api/properties")
        assert response.status_code == 200
        body = response.json()
        assert len(body) == len(SAMPLE_PROPERTIES)
        assert {"squareFeet", "propertyType", "hasTour", "viewCount", "createdAt"} <= set(body[0])

    def test_get_property(self, client):
        response = client.get("/api/properties/3")
        assert response.status_code == 200
        assert response.json()["title"] == "Skyline Penthouse"

    def test_unknown_property_is_404(self, client):
        response = client.get("/api/properties/999")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_non_numeric_id_is_400(self, client):
        response = client.get("/api/properties/abc")
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_featured(self, client):
        response = client.get("/api/properties/featured")
        assert [p["title"] for p in response.json()] == ["La Rose Royal Apartments"]

    def test_category(self, client):
        response = client.get("/api/properties/category/bank_sales")
        assert response.status_code == 200
        assert {p["title"] for p in response.json()} == {"Harbor View Residence", "The Metropolitan"}

    def test_unknown_category_is_400(self, client):
        response = client.get("/api/properties/category/castles")
        assert response.status_code == 400
        assert "castles" in response.json()["message"]

    def test_search(self, client):
        response = client.get("/api/properties/search", params={"q": "palm"})
        assert [p["title"] for p in response.json()] == ["Palm Springs Villa"]

    def test_filter(self, client):
        response = client.post(
            "/api/properties/filter",
            json={"category": "rental_units", "maxPrice": 3200, "amenities": ["Pet Friendly"]}
        )
        assert response.status_code == 200
        assert [p["title"] for p in response.json()] == ["Modern Garden Flat"]

    def test_filter_rejects_inverted_price_range(self, client):
        response = client.post("/api/properties/filter", json={"minPrice": 5000, "maxPrice": 1000})
        assert response.status_code == 400

    def test_recent_limit(self, client):
        response = client.get("/api/properties/recent", params={"limit": 2})
        assert len(response.json()) == 2

    def test_popular_limit_is_bounded(self, client):
        assert client.get("/api/properties/popular", params={"limit": 0}).status_code == 400


class TestViews:

    def test_record_view(self, client):
        first = client.post("/api/properties/2/view")
        second = client.post("/api/properties/2/view")
        assert first.json() == {"id": 2, "viewCount": 1}
        assert second.json() == {"id": 2, "viewCount": 2}

        popular = client.get("/api/properties/popular", params={"limit": 1}).json()
        assert popular[0]["id"] == 2

    def test_view_of_unknown_property(self, client):
        assert client.post("/api/properties/999/view").status_code == 404


class TestManagement:

    def test_create_requires_token(self, client):
        response = client.post("/api/properties", json=PropertyFactory.create_property_data())
        assert response.status_code == 401

    def test_create_forbidden_for_users(self, client, user_headers):
        response = client.post("/api/properties", json=PropertyFactory.create_property_data(), headers=user_headers)
        assert response.status_code == 403

    @pytest.mark.parametrize("path", ["/api/properties", "/api/properties/create"])
    def test_manager_creates_property(self, client, manager_headers, path):
        response = client.post(path, json=PropertyFactory.create_property_data(), headers=manager_headers)
        assert response.status_code == 201
        created = response.json()
        assert created["id"] == len(SAMPLE_PROPERTIES) + 1
        assert created["bathrooms"] == 1.5
        assert created["viewCount"] == 0

        fetched = client.get(f"/api/properties/{created['id']}").json()
        assert fetched["title"] == "Kololo Hillside Apartment"

    def test_create_accepts_snake_case(self, client, admin_headers):
        data = PropertyFactory.create_property_data()
        data["square_feet"] = data.pop("squareFeet")
        data["property_type"] = data.pop("propertyType")
        response = client.post("/api/properties", json=data, headers=admin_headers)
        assert response.status_code == 201

    @pytest.mark.parametrize("overrides", [
        {"price": -5},
        {"title": "  "},
        {"category": "castles"},
        {"description": "too short"},
        {"currency": "SHILLING"},
    ])
    def test_create_validation(self, client, admin_headers, overrides):
        response = client.post(
            "/api/properties",
            json=PropertyFactory.create_property_data(**overrides),
            headers=admin_headers
        )
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"]

    def test_partial_update(self, client, manager_headers):
        response = client.patch("/api/properties/2", json={"price": 2700, "isFeatured": True}, headers=manager_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["price"] == 2700
        assert body["isFeatured"] is True
        assert body["title"] == "Luxury Downtown Loft"

    def test_update_can_clear_tour_url(self, client, manager_headers):
        response = client.patch("/api/properties/1", json={"tourUrl": None, "hasTour": False}, headers=manager_headers)
        assert response.status_code == 200
        assert response.json()["tourUrl"] is None

    def test_update_rejects_null_title(self, client, manager_headers):
        response = client.patch("/api/properties/2", json={"title": None}, headers=manager_headers)
        assert response.status_code == 400

    def test_empty_update(self, client, manager_headers):
        response = client.patch("/api/properties/2", json={}, headers=manager_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "No fields provided for update"

    def test_update_unknown_property(self, client, manager_headers):
        response = client.patch("/api/properties/999", json={"price": 10}, headers=manager_headers)
        assert response.status_code == 404

    def test_delete_removes_files(self, client, manager_headers):
        image = settings.image_upload_path / "cafe0001.png"
        image.write_bytes(b"png")
        tour_dir = settings.tour_upload_path / "property_4_tour"
        tour_dir.mkdir()
        (tour_dir / "index.htm").write_text("tour")
        client.patch("/api/properties/4", json={"imageUrl": "/uploads/images/cafe0001.png"}, headers=manager_headers)

        response = client.delete("/api/properties/4", headers=manager_headers)

        assert response.status_code == 204
        assert client.get("/api/properties/4").status_code == 404
        assert not image.exists()
        assert not tour_dir.exists()

    def test_delete_unknown_property(self, client, manager_headers):
        assert client.delete("/api/properties/999", headers=manager_headers).status_code == 404


class TestCatalog:

    def test_lists_are_public(self, client):
        assert len(client.get("/api/amenities").json()) == 4
        assert len(client.get("/api/property-types").json()) == 7

    def test_admin_creates_amenity(self, client, admin_headers):
        response = client.post(
            "/api/amenities",
            json={"name": "Sauna", "icon": "hot-tub", "description": "Private sauna"},
            headers=admin_headers
        )
        assert response.status_code == 201
        assert response.json()["id"] == 5

    def test_manager_cannot_create_property_type(self, client, manager_headers):
        response = client.post("/api/property-types", json={"name": "Cabins", "icon": "tree"}, headers=manager_headers)
        assert response.status_code == 403
