"""
Test fixtures package.

Provides in-memory repository implementations and a controllable clock.
"""

from .mock_repositories import FrozenClock, MockBlobStorage, MockFileRecordRepository

__all__ = [
    "FrozenClock",
    "MockBlobStorage",
    "MockFileRecordRepository",
]
