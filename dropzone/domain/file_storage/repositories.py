"""
File Storage Repositories

Repository interface for file record metadata persistence.
Concrete implementations are in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from .entities import FileRecord


class FileRecordRepository(ABC):
    """
    Abstract repository interface for file record metadata.

    Implementations index records by keyword and by expiry time.
    Store failures must surface as StorageUnavailableError, never as
    empty results.
    """

    @abstractmethod
    def insert(self, record: FileRecord) -> str:
        """
        Insert a new record.

        Args:
            record: FileRecord to persist (its id is ignored)

        Returns:
            Id assigned by the store
        """
        pass  # pragma: no cover

    @abstractmethod
    def find_live_by_keyword(self, keyword: str, now: datetime) -> List[FileRecord]:
        """
        Retrieve live records for a keyword.

        Args:
            keyword: Normalized keyword
            now: Reference time for liveness

        Returns:
            Records with ``expires_at > now``, newest ``uploaded_at`` first
        """
        pass  # pragma: no cover

    @abstractmethod
    def find_live(
        self, keyword: str, file_name: str, now: datetime
    ) -> Optional[FileRecord]:
        """
        Retrieve the live record for a file name under a keyword.

        Returns:
            FileRecord if a live one exists, None otherwise
        """
        pass  # pragma: no cover

    @abstractmethod
    def find_by_keyword(self, keyword: str) -> List[FileRecord]:
        """
        Retrieve every record for a keyword, live or expired.

        Returns:
            Records newest first
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, record_id: str) -> bool:
        """
        Delete a record by id.

        Returns:
            True if a record was deleted, False if it did not exist
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete_by_keyword(self, keyword: str) -> int:
        """
        Delete every record for a keyword, live or expired.

        Returns:
            Number of records deleted
        """
        pass  # pragma: no cover

    @abstractmethod
    def find_expired(self, now: datetime) -> List[FileRecord]:
        """
        Retrieve every record with ``expires_at <= now``.

        Returns:
            Expired records, oldest expiry first
        """
        pass  # pragma: no cover
