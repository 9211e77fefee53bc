"""
Unit tests for the expire sweep task

Tests that the Celery task resolves FileService from the DependencyContainer,
returns the maintenance statistics, and handles exceptions gracefully.
"""

from unittest.mock import MagicMock, Mock, patch

import pytest


@pytest.fixture
def mock_file_service():
    """Mock FileService for testing."""
    mock = Mock()
    mock.run_maintenance.return_value = {
        "expired_files_removed": 4,
        "orphaned_blobs_reclaimed": 1,
        "errors": [],
    }
    return mock


@pytest.fixture
def mock_container(mock_file_service):
    """Mock DependencyContainer returning the FileService mock."""
    mock = MagicMock()

    def resolve_side_effect(service_type):
        from dropzone.application.file_service import FileService

        if service_type == FileService:
            return mock_file_service
        raise ValueError(f"Unknown service type: {service_type}")

    mock.resolve.side_effect = resolve_side_effect
    return mock


class TestExpireSweepTask:
    """Test run_expire_sweep."""

    @patch("celery_app.flask_app")
    def test_resolves_file_service_from_container(
        self, mock_flask_app, mock_container, mock_file_service
    ):
        """
        Test that the task resolves FileService from the container.

        Verifies that:
        - Task accesses flask_app.container
        - container.resolve() is called with FileService
        - Maintenance statistics are returned unchanged
        """
        mock_flask_app.container = mock_container

        from dropzone.application.file_service import FileService
        from dropzone.tasks.expire_sweep_task import run_expire_sweep

        result = run_expire_sweep()

        mock_container.resolve.assert_called_once_with(FileService)
        mock_file_service.run_maintenance.assert_called_once()
        assert result == {
            "expired_files_removed": 4,
            "orphaned_blobs_reclaimed": 1,
            "errors": [],
        }

    @patch("celery_app.flask_app")
    def test_step_errors_are_passed_through(
        self, mock_flask_app, mock_container, mock_file_service
    ):
        mock_flask_app.container = mock_container
        mock_file_service.run_maintenance.return_value = {
            "expired_files_removed": 0,
            "orphaned_blobs_reclaimed": 2,
            "errors": ["Expire sweep failed: redis down"],
        }

        from dropzone.tasks.expire_sweep_task import run_expire_sweep

        result = run_expire_sweep()

        assert result["orphaned_blobs_reclaimed"] == 2
        assert result["errors"] == ["Expire sweep failed: redis down"]

    @patch("celery_app.flask_app")
    def test_unexpected_failure_returns_zero_counts(
        self, mock_flask_app, mock_container, mock_file_service
    ):
        mock_flask_app.container = mock_container
        mock_file_service.run_maintenance.side_effect = RuntimeError("boom")

        from dropzone.tasks.expire_sweep_task import run_expire_sweep

        result = run_expire_sweep()

        assert result["expired_files_removed"] == 0
        assert result["orphaned_blobs_reclaimed"] == 0
        assert "boom" in result["errors"][0]

    @patch("celery_app.flask_app")
    def test_missing_container_is_reported(self, mock_flask_app):
        mock_flask_app.container = None

        from dropzone.tasks.expire_sweep_task import run_expire_sweep

        result = run_expire_sweep()

        assert len(result["errors"]) == 1


class TestBeatSchedule:
    def test_sweep_is_scheduled_on_cleanup_queue(self):
        from dropzone.config.celery_config import CeleryConfig, EXPIRE_SWEEP_TASK

        entry = CeleryConfig.beat_schedule["expire-sweep"]
        assert entry["task"] == EXPIRE_SWEEP_TASK
        assert entry["schedule"] > 0
        assert CeleryConfig.task_routes[EXPIRE_SWEEP_TASK] == {"queue": "cleanup_queue"}
