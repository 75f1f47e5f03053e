"""Tests for the cache administration endpoints."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from hookcache.exceptions import ConfigurationError
from hookcache.main import create_app

from .conftest import make_settings


@pytest.fixture
def client():
    app = create_app(make_settings())
    with TestClient(app) as client:
        yield client


def store_of(client):
    return client.app.state.store_registry.get("cache")


class TestAdminApi:
    def test_health(self, client):
        response = client.get("/v1/cache/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["store_connected"] is True
        assert body["store_name"] == "cache"

    def test_touch_service(self, client):
        response = client.post("/v1/cache/touch/users")

        assert response.status_code == 200
        assert response.json() == {"key": "test:users", "touched": True}
        assert asyncio.run(store_of(client).get("test:users")) is not None

    def test_touch_item(self, client):
        response = client.post("/v1/cache/touch/users/42")

        assert response.json() == {"key": "test:users:42", "touched": True}

    def test_delete_key(self, client):
        store = store_of(client)
        asyncio.run(store.set("test:users", "{}"))

        response = client.delete("/v1/cache/keys/test:users")

        assert response.status_code == 200
        assert response.json() == {"cleared": True, "key": "test:users"}
        assert asyncio.run(store.get("test:users")) is None

    def test_clear(self, client):
        store = store_of(client)
        asyncio.run(store.set("test:a", "1"))

        response = client.post("/v1/cache/clear")

        assert response.json() == {"cleared": True, "key": None}
        assert asyncio.run(store.get("test:a")) is None

    def test_missing_store_name_fails_startup(self):
        app = create_app(make_settings(store_name=None))

        with pytest.raises(ConfigurationError):
            with TestClient(app):
                pass
