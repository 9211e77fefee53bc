"""Infrastructure layer for Redis, blob storage and external services."""

from .local_blob_storage_repository import LocalBlobStorageRepository
from .redis_file_record_repository import RedisFileRecordRepository
from .redis_repository import RedisConnectionManager, RedisRepository
from .storage_factory import StorageFactory

__all__ = [
    "RedisRepository",
    "RedisConnectionManager",
    "RedisFileRecordRepository",
    "LocalBlobStorageRepository",
    "StorageFactory",
]
