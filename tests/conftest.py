"""
Shared pytest fixtures and configuration for the Drop Zone test suite.

This module provides:
- Hypothesis configuration for property-based testing
- In-memory repositories and a controllable clock
- A lifecycle manager and file service wired to the in-memory stores
"""

import pytest

# Hypothesis configuration
from hypothesis import settings, HealthCheck, Phase

from dropzone.application.event_publisher import EventPublisher
from dropzone.application.file_service import FileService
from dropzone.domain.file_storage.services import FileLifecycleManager
from tests.fixtures.mock_repositories import (
    FrozenClock,
    MockBlobStorage,
    MockFileRecordRepository,
)

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile("default")


# =============================================================================
# Clock and Repository Fixtures
# =============================================================================

@pytest.fixture
def clock() -> FrozenClock:
    """Provide a clock frozen at 2024-01-15 12:00 UTC."""
    return FrozenClock()


@pytest.fixture
def file_repository() -> MockFileRecordRepository:
    """Provide an in-memory metadata store."""
    return MockFileRecordRepository()


@pytest.fixture
def blob_storage(clock) -> MockBlobStorage:
    """Provide an in-memory blob store following the frozen clock."""
    return MockBlobStorage(clock=clock)


@pytest.fixture
def event_publisher() -> EventPublisher:
    return EventPublisher()


@pytest.fixture
def published_events(event_publisher):
    """Collect every domain event published during the test."""
    from dropzone.domain.events import DomainEvent

    events = []
    event_publisher.subscribe(DomainEvent, events.append)
    return events


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def lifecycle_manager(file_repository, blob_storage, event_publisher, clock):
    """Provide a FileLifecycleManager wired to the in-memory stores."""
    return FileLifecycleManager(
        file_repository,
        blob_storage,
        event_publisher=event_publisher,
        clock=clock,
    )


@pytest.fixture
def file_service(lifecycle_manager) -> FileService:
    return FileService(lifecycle_manager)


# =============================================================================
# Pytest Configuration Hooks
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (require external services)"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests (full workflows)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/integration/* -> @pytest.mark.integration
    - tests/e2e/* -> @pytest.mark.e2e
    - tests/property/* -> @pytest.mark.property
    """
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/e2e/" in test_path or "\\e2e\\" in test_path:
            item.add_marker(pytest.mark.e2e)
        elif "/property/" in test_path or "\\property\\" in test_path:
            item.add_marker(pytest.mark.property)
