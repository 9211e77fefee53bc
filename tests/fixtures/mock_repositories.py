"""
Mock Repository Implementations

In-memory mock implementations of repository interfaces for unit testing.
Provides realistic behavior with inspection methods for test assertions.
"""

import uuid
from datetime import datetime, timedelta, timezone
from io import BytesIO
from typing import Any, BinaryIO, Dict, List, Optional, Set, Union

from dropzone.domain.errors import StorageUnavailableError
from dropzone.domain.file_storage.entities import FileRecord
from dropzone.domain.file_storage.repositories import FileRecordRepository
from dropzone.domain.file_storage.storage_repository import IBlobStorageRepository


class FrozenClock:
    """
    Controllable clock returning timezone-aware UTC datetimes.

    Pass the instance itself as the ``clock`` of FileLifecycleManager.
    """

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        """Move the clock forward by ``timedelta(**kwargs)``."""
        self.now = self.now + timedelta(**kwargs)
        return self.now


class MockFileRecordRepository(FileRecordRepository):
    """
    In-memory mock implementation of FileRecordRepository.

    ``fail_on`` names methods that raise StorageUnavailableError, to
    simulate metadata store outages.
    """

    def __init__(self):
        self._storage: Dict[str, FileRecord] = {}
        self._call_history: List[Dict[str, Any]] = []
        self.fail_on: Set[str] = set()

    def _record_call(self, method: str, **kwargs) -> None:
        self._call_history.append({"method": method, "args": kwargs})
        if method in self.fail_on:
            raise StorageUnavailableError(f"Simulated metadata failure in {method}")

    def insert(self, record: FileRecord) -> str:
        self._record_call("insert", blob_ref=record.blob_ref)
        record_id = uuid.uuid4().hex
        stored = FileRecord.from_dict({**record.to_dict(), "id": record_id})
        self._storage[record_id] = stored
        return record_id

    def find_by_keyword(self, keyword: str) -> List[FileRecord]:
        self._record_call("find_by_keyword", keyword=keyword)
        records = [r for r in self._storage.values() if r.keyword == keyword]
        return sorted(records, key=lambda r: r.uploaded_at, reverse=True)

    def find_live_by_keyword(self, keyword: str, now: datetime) -> List[FileRecord]:
        self._record_call("find_live_by_keyword", keyword=keyword)
        records = [
            r for r in self._storage.values()
            if r.keyword == keyword and r.is_live(now)
        ]
        return sorted(records, key=lambda r: r.uploaded_at, reverse=True)

    def find_live(
        self, keyword: str, file_name: str, now: datetime
    ) -> Optional[FileRecord]:
        self._record_call("find_live", keyword=keyword, file_name=file_name)
        matches = [
            r for r in self._storage.values()
            if r.keyword == keyword and r.file_name == file_name and r.is_live(now)
        ]
        return max(matches, key=lambda r: r.uploaded_at) if matches else None

    def delete(self, record_id: str) -> bool:
        self._record_call("delete", record_id=record_id)
        return self._storage.pop(record_id, None) is not None

    def delete_by_keyword(self, keyword: str) -> int:
        self._record_call("delete_by_keyword", keyword=keyword)
        ids = [rid for rid, r in self._storage.items() if r.keyword == keyword]
        for rid in ids:
            del self._storage[rid]
        return len(ids)

    def find_expired(self, now: datetime) -> List[FileRecord]:
        self._record_call("find_expired")
        records = [r for r in self._storage.values() if not r.is_live(now)]
        return sorted(records, key=lambda r: r.expires_at)

    # Inspection methods for testing
    def get_call_history(self) -> List[Dict[str, Any]]:
        return self._call_history.copy()

    def get_all_records(self) -> Dict[str, FileRecord]:
        return self._storage.copy()

    def add(self, record: FileRecord) -> FileRecord:
        """Store a record directly, bypassing the lifecycle manager."""
        record.id = record.id or uuid.uuid4().hex
        self._storage[record.id] = record
        return record

    def clear(self) -> None:
        self._storage.clear()
        self._call_history.clear()


class MockBlobStorage(IBlobStorageRepository):
    """
    In-memory mock implementation of IBlobStorageRepository.

    Blob modification times follow the injected clock. ``fail_on`` names
    methods that raise StorageUnavailableError; ``fail_paths`` restricts
    delete failures to specific paths.
    """

    def __init__(self, clock=None):
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self._blobs: Dict[str, bytes] = {}
        self._updated: Dict[str, datetime] = {}
        self._content_types: Dict[str, Optional[str]] = {}
        self._call_history: List[Dict[str, Any]] = []
        self.fail_on: Set[str] = set()
        self.fail_paths: Set[str] = set()
        self.container_ready = False

    def _record_call(self, method: str, path: Optional[str] = None) -> None:
        self._call_history.append({"method": method, "args": {"path": path}})
        if method in self.fail_on:
            raise StorageUnavailableError(f"Simulated blob failure in {method}")

    def ensure_container(self) -> None:
        self._record_call("ensure_container")
        self.container_ready = True

    def put(
        self,
        path: str,
        content: Union[bytes, BinaryIO],
        content_type: Optional[str] = None,
    ) -> str:
        self._record_call("put", path)
        data = content if isinstance(content, bytes) else content.read()
        self._blobs[path] = data
        self._updated[path] = self.clock()
        self._content_types[path] = content_type
        return path

    def get(self, path: str) -> Optional[BinaryIO]:
        self._record_call("get", path)
        if path not in self._blobs:
            return None
        return BytesIO(self._blobs[path])

    def delete(self, path: str) -> bool:
        self._record_call("delete", path)
        if path in self.fail_paths:
            raise StorageUnavailableError(f"Simulated delete failure for {path}")
        self._blobs.pop(path, None)
        self._updated.pop(path, None)
        self._content_types.pop(path, None)
        return True

    def list_paths(self, prefix: str = "") -> List[str]:
        self._record_call("list_paths", prefix)
        return sorted(p for p in self._blobs if p.startswith(prefix))

    def generate_signed_url(self, path: str, ttl_minutes: int = 15) -> str:
        self._record_call("generate_signed_url", path)
        return f"https://blobs.example.com/{path}?ttl={ttl_minutes}"

    def get_updated_at(self, path: str) -> Optional[datetime]:
        self._record_call("get_updated_at", path)
        return self._updated.get(path)

    def exists(self, path: str) -> bool:
        return path in self._blobs

    # Inspection methods for testing
    def get_call_history(self) -> List[Dict[str, Any]]:
        return self._call_history.copy()

    def calls_to(self, method: str) -> List[Optional[str]]:
        """Paths passed to every call of ``method``."""
        return [c["args"]["path"] for c in self._call_history if c["method"] == method]

    def read(self, path: str) -> Optional[bytes]:
        return self._blobs.get(path)

    def add_blob(self, path: str, data: bytes, updated_at: datetime) -> None:
        """Store a blob directly, bypassing the lifecycle manager."""
        self._blobs[path] = data
        self._updated[path] = updated_at

    def paths(self) -> List[str]:
        return sorted(self._blobs)
