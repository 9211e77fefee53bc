"""
Application Services Layer

Orchestrates domain services and coordinates use cases.
"""

from .event_publisher import EventPublisher
from .file_service import FileService, UploadedFile, UploadReport

__all__ = [
    'EventPublisher',
    'FileService',
    'UploadedFile',
    'UploadReport',
]
