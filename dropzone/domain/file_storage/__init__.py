"""
File Storage Domain

Handles keyword-addressed file records, blob storage contracts,
signed URLs and the expiring file lifecycle.
"""

from .entities import FileRecord, utc_now
from .repositories import FileRecordRepository
from .services import FileLifecycleManager
from .signed_url_service import SignedUrl, SignedUrlService
from .storage_repository import IBlobStorageRepository
from .value_objects import FILE_TTL, MAX_FILE_SIZE, FileName, Keyword

__all__ = [
    "FILE_TTL",
    "MAX_FILE_SIZE",
    "FileLifecycleManager",
    "FileName",
    "FileRecord",
    "FileRecordRepository",
    "IBlobStorageRepository",
    "Keyword",
    "SignedUrl",
    "SignedUrlService",
    "utc_now",
]
