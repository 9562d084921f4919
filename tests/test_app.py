"""
Tests for application startup, health reporting and static mounts.
"""

import json

from fastapi import FastAPI
from fastapi.testclient import TestClient

from realevr.config import settings
from realevr.static import SPAStaticFiles
from realevr.main import app


def test_lifespan_loads_storage_and_bootstraps_admin(monkeypatch, tmp_path):
    data_file = tmp_path / "data.json"
    monkeypatch.setattr(settings, "data_file", str(data_file))
    monkeypatch.setattr(settings, "admin_username", "root")
    monkeypatch.setattr(settings, "admin_password", "rootpass1")

    with TestClient(app) as client:
        health = client.get("/health").json()
        assert health["status"] == "healthy"
        assert health["storage"] == "MemStorage"

        login = client.post("/api/login", json={"username": "root", "password": "rootpass1"})
        assert login.status_code == 200
        assert login.json()["user"]["role"] == "admin"

        client.post("/api/properties/1/view")

    # Shutdown flushes pending view counts
    stored = json.loads(data_file.read_text())
    assert stored["properties"][0]["viewCount"] == 1
    assert [u["username"] for u in stored["users"]] == ["root"]


def test_health_without_lifespan():
    response = TestClient(app).get("/health")
    assert response.status_code == 200
    assert "cache-control" not in response.headers


def test_spa_fallback(tmp_path):
    (tmp_path / "index.html").write_text("<div id=root></div>")
    (tmp_path / "app.js").write_text("console.log('realevr')")
    spa = FastAPI()
    spa.mount("/", SPAStaticFiles(directory=tmp_path), name="client")
    client = TestClient(spa)

    assert client.get("/app.js").text == "console.log('realevr')"
    assert "id=root" in client.get("/properties/12").text
    assert client.get("/api/missing").status_code == 404
