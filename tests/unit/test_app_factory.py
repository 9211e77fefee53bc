"""
Unit tests for the application factory

Builds the full app around an injected container so no Redis or GCS
connection is needed.
"""

import io
from unittest.mock import patch

import pytest

from app_factory import create_app
from dropzone.application.dependency_container import DependencyContainer
from dropzone.application.file_service import FileService
from dropzone.domain.file_storage import (
    FileLifecycleManager,
    IBlobStorageRepository,
    SignedUrlService,
)


@pytest.fixture
def container(lifecycle_manager, blob_storage):
    container = DependencyContainer()
    container.register_singleton(SignedUrlService, SignedUrlService(secret_key="s"))
    container.register_singleton(IBlobStorageRepository, blob_storage)
    container.register_singleton(FileLifecycleManager, lifecycle_manager)
    container.register_singleton(FileService, FileService(lifecycle_manager))
    return container


@pytest.fixture
def app(container):
    app = create_app(container=container)
    app.config["TESTING"] = True
    return app


class TestCreateApp:
    def test_uses_injected_container(self, app, container):
        assert app.container is container

    def test_blueprint_routes_are_served(self, app):
        client = app.test_client()

        response = client.post(
            "/api/v1/files",
            data={"keyword": "team-q1", "file": [(io.BytesIO(b"hi"), "hello.txt")]},
            content_type="multipart/form-data",
        )
        assert response.status_code == 201

        listing = client.get("/api/v1/keywords/team-q1/files").get_json()
        assert [f["file_name"] for f in listing["files"]] == ["hello.txt"]

    def test_swagger_spec_lists_namespaces(self, app):
        spec = app.test_client().get("/api/v1/swagger.json").get_json()
        assert spec["info"]["title"] == "Drop Zone API"
        assert "/files" in spec["paths"]
        assert "/keywords/{keyword}/files" in spec["paths"]


class TestHealthEndpoint:
    @patch("app_factory.redis_health_check", return_value=True)
    def test_healthy(self, _health, app):
        response = app.test_client().get("/health")

        assert response.status_code == 200
        body = response.get_json()
        assert body["redis"] == "connected"
        assert body["storage"] == "MockBlobStorage"

    @patch("app_factory.redis_health_check", return_value=False)
    def test_redis_down_is_degraded(self, _health, app):
        response = app.test_client().get("/health")

        assert response.status_code == 503
        assert response.get_json()["status"] == "degraded"

    @patch("app_factory.redis_health_check", return_value=True)
    def test_missing_container_is_degraded(self, _health, app):
        app.container = None
        response = app.test_client().get("/health")

        assert response.status_code == 503
        assert response.get_json()["storage"] == "unavailable"
