"""
API tests for property image and virtual tour uploads, and the static mounts serving them.
"""

import io
import zipfile

import pytest

from realevr.config import settings
from realevr.utils.file_utils import FileValidator
from tests.conftest import create_test_image, create_test_zip


def upload_tour(client, headers, data: bytes, property_id: int = 2, filename: str = "tour.zip",
                content_type: str = "application/zip"):
    return client.post(
        f"/api/upload/virtual-tour/{property_id}",
        files={"tourZip": (filename, data, content_type)},
        headers=headers
    )


class TestImageUpload:

    def test_upload_image(self, client, manager_headers):
        response = client.post(
            "/api/upload/property-image",
            files={"image": ("front.png", create_test_image(), "image/png")},
            headers=manager_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["imagePath"].startswith("/uploads/images/")
        assert body["imagePath"].endswith(".png")

        stored = settings.image_upload_path / body["imagePath"].rsplit("/", 1)[1]
        assert stored.is_file()

    def test_extension_follows_content(self, client, manager_headers):
        response = client.post(
            "/api/upload/property-image",
            files={"image": ("photo.png", create_test_image(format="JPEG"), "image/png")},
            headers=manager_headers
        )
        assert response.json()["imagePath"].endswith(".jpg")

    def test_non_image_mime_type(self, client, manager_headers):
        response = client.post(
            "/api/upload/property-image",
            files={"image": ("notes.txt", b"hello", "text/plain")},
            headers=manager_headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Only image files are allowed!"

    def test_undecodable_image_is_removed(self, client, manager_headers):
        response = client.post(
            "/api/upload/property-image",
            files={"image": ("evil.png", b"<html>not an image</html>", "image/png")},
            headers=manager_headers
        )
        assert response.status_code == 400
        assert list(settings.image_upload_path.iterdir()) == []
        assert list(settings.incoming_upload_path.iterdir()) == []

    def test_oversized_image(self, client, manager_headers, monkeypatch):
        monkeypatch.setattr(settings, "max_image_size", 16)
        response = client.post(
            "/api/upload/property-image",
            files={"image": ("big.png", create_test_image(), "image/png")},
            headers=manager_headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "File too large"
        assert list(settings.image_upload_path.iterdir()) == []
        assert list(settings.incoming_upload_path.iterdir()) == []

    def test_image_is_not_served_before_validation(self, client, manager_headers, monkeypatch):
        served_during_check = []
        validate = FileValidator.validate_image_content

        def recording_validate(path):
            served_during_check.extend(settings.image_upload_path.iterdir())
            assert path.parent == settings.incoming_upload_path
            return validate(path)

        monkeypatch.setattr(FileValidator, "validate_image_content", recording_validate)
        response = client.post(
            "/api/upload/property-image",
            files={"image": ("front.png", create_test_image(), "image/png")},
            headers=manager_headers
        )

        assert response.status_code == 200
        assert served_during_check == []
        assert list(settings.incoming_upload_path.iterdir()) == []

    def test_requires_manager(self, client, user_headers):
        response = client.post(
            "/api/upload/property-image",
            files={"image": ("front.png", create_test_image(), "image/png")},
            headers=user_headers
        )
        assert response.status_code == 403

    def test_uploaded_image_is_served_with_cache_header(self, client, manager_headers):
        path = client.post(
            "/api/upload/property-image",
            files={"image": ("front.png", create_test_image(), "image/png")},
            headers=manager_headers
        ).json()["imagePath"]

        response = client.get(path)
        assert response.status_code == 200
        assert response.headers["cache-control"] == "public, max-age=86400"


class TestTourUpload:

    def test_upload_tour(self, client, manager_headers):
        response = upload_tour(client, manager_headers, create_test_zip(["index.htm", "tour.xml"]))

        assert response.status_code == 200
        body = response.json()
        assert body["tourUrl"] == "/uploads/tours/property_2_tour/index.htm"
        assert body["property"]["hasTour"] is True
        assert body["property"]["tourUrl"] == body["tourUrl"]

        prop = client.get("/api/properties/2").json()
        assert prop["tourUrl"] == body["tourUrl"]
        assert (settings.tour_upload_path / "property_2_tour" / "tour.xml").is_file()

    def test_tour_is_served(self, client, manager_headers):
        zip_bytes = create_test_zip(["index.htm"], {"index.htm": b"<html>Harbor tour</html>"})
        tour_url = upload_tour(client, manager_headers, zip_bytes).json()["tourUrl"]

        response = client.get(tour_url)
        assert response.status_code == 200
        assert b"Harbor tour" in response.content
        assert response.headers["cache-control"] == "public, max-age=3600"

    def test_nested_folder_with_spaces(self, client, manager_headers):
        response = upload_tour(client, manager_headers, create_test_zip(["My Tour/index.html", "My Tour/pano.jpg"]))
        assert response.json()["tourUrl"] == "/uploads/tours/property_2_tour/My%20Tour/index.html"

    def test_replaces_previous_tour(self, client, manager_headers):
        upload_tour(client, manager_headers, create_test_zip(["index.htm", "old.js"]))
        upload_tour(client, manager_headers, create_test_zip(["index.htm", "new.js"]))

        tour_dir = settings.tour_upload_path / "property_2_tour"
        assert sorted(p.name for p in tour_dir.iterdir()) == ["index.htm", "new.js"]

    def test_no_leftovers_in_tours_directory(self, client, manager_headers):
        upload_tour(client, manager_headers, create_test_zip(["index.htm"]))
        upload_tour(client, manager_headers, create_test_zip(["readme.txt"]))
        assert [p.name for p in settings.tour_upload_path.iterdir()] == ["property_2_tour"]

    def test_oversized_archive(self, client, manager_headers, monkeypatch):
        before = client.get("/api/properties/2").json()
        monkeypatch.setattr(settings, "max_tour_size", 32)

        response = upload_tour(client, manager_headers, create_test_zip(["index.htm", "tour.xml"]))

        assert response.status_code == 400
        assert response.json()["message"] == "File too large"
        assert list(settings.tour_upload_path.iterdir()) == []
        assert list(settings.incoming_upload_path.iterdir()) == []
        assert client.get("/api/properties/2").json() == before

    def test_archive_too_large_once_extracted(self, client, manager_headers, monkeypatch):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr("index.htm", b"<html>" + b" " * 65536 + b"</html>")
        zip_bytes = buffer.getvalue()
        monkeypatch.setattr(settings, "max_tour_size", 4096)

        response = upload_tour(client, manager_headers, zip_bytes)

        assert response.status_code == 400
        assert response.json()["message"] == "Tour archive is too large once extracted"
        assert list(settings.incoming_upload_path.iterdir()) == []

    def test_missing_index_leaves_property_untouched(self, client, manager_headers):
        before = client.get("/api/properties/2").json()

        response = upload_tour(client, manager_headers, create_test_zip(["readme.txt"]))

        assert response.status_code == 400
        assert "index.htm" in response.json()["message"]
        assert client.get("/api/properties/2").json() == before

    def test_failed_upload_keeps_existing_tour(self, client, manager_headers):
        upload_tour(client, manager_headers, create_test_zip(["index.htm"]))
        upload_tour(client, manager_headers, create_test_zip(["readme.txt"]))
        assert (settings.tour_upload_path / "property_2_tour" / "index.htm").is_file()

    def test_not_a_zip(self, client, manager_headers):
        response = upload_tour(client, manager_headers, b"hello", filename="tour.txt", content_type="text/plain")
        assert response.status_code == 400
        assert response.json()["message"] == "Not a zip file! Please upload a valid zip file."

    def test_corrupt_zip(self, client, manager_headers):
        response = upload_tour(client, manager_headers, b"PK garbage")
        assert response.status_code == 400

    def test_zip_slip_rejected(self, client, manager_headers):
        response = upload_tour(client, manager_headers, create_test_zip(["index.htm", "../../escape.htm"]))
        assert response.status_code == 400
        assert not (settings.upload_path / "escape.htm").exists()

    def test_unknown_property(self, client, manager_headers):
        response = upload_tour(client, manager_headers, create_test_zip(["index.htm"]), property_id=999)
        assert response.status_code == 404

    @pytest.mark.parametrize("headers_fixture,status", [("user_headers", 403), (None, 401)])
    def test_requires_manager(self, client, request, headers_fixture, status):
        headers = request.getfixturevalue(headers_fixture) if headers_fixture else {}
        response = upload_tour(client, headers, create_test_zip(["index.htm"]))
        assert response.status_code == status


def test_api_responses_are_not_cached(client):
    response = client.get("/api/properties")
    assert response.headers["cache-control"] == "no-store"
