"""
Blob Storage Repository Interface

Abstract interface for binary content storage.
This abstraction keeps the domain layer infrastructure-agnostic by defining
the contract for blob operations without depending on a specific backend
(local filesystem, Google Cloud Storage, etc.).

Blobs are addressed by path, organised as ``keyword/file_name``.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import BinaryIO, List, Optional, Union


class IBlobStorageRepository(ABC):
    """
    Unified interface for blob storage operations.

    Contract Guarantees:
    - delete() is idempotent: deleting a missing blob succeeds
    - get(), get_updated_at() return None for missing blobs
    - exists() never raises for invalid paths
    - Backend failures and timeouts raise StorageUnavailableError
    - Paths are relative to the container root

    Thread Safety:
    - Implementations must be safe for concurrent use; concurrent writes to
      the same path resolve as last-write-wins
    """

    @abstractmethod
    def ensure_container(self) -> None:
        """
        Make sure the container (bucket or root directory) exists.

        Raises:
            StorageUnavailableError: If the container cannot be created
        """
        pass  # pragma: no cover

    @abstractmethod
    def put(
        self,
        path: str,
        content: Union[bytes, BinaryIO],
        content_type: Optional[str] = None,
    ) -> str:
        """
        Store content at ``path``, overwriting any existing blob.

        Args:
            path: Blob path (e.g., 'team-q1/report.pdf')
            content: Raw bytes or a binary file-like object
            content_type: MIME type stored with the blob where supported

        Returns:
            Location of the stored blob

        Raises:
            ValueError: If path is empty or escapes the container
            StorageUnavailableError: If the write fails
        """
        pass  # pragma: no cover

    @abstractmethod
    def get(self, path: str) -> Optional[BinaryIO]:
        """
        Retrieve blob content.

        Returns:
            Binary stream positioned at 0, or None if the blob doesn't exist.
            The caller is responsible for closing the stream.
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, path: str) -> bool:
        """
        Delete a blob. Idempotent.

        Returns:
            True if the blob was deleted or didn't exist

        Raises:
            StorageUnavailableError: If the delete fails
        """
        pass  # pragma: no cover

    @abstractmethod
    def list_paths(self, prefix: str = "") -> List[str]:
        """
        List blob paths starting with ``prefix``.

        Args:
            prefix: Path prefix (e.g., 'team-q1/'); empty lists everything

        Returns:
            Sorted list of blob paths
        """
        pass  # pragma: no cover

    @abstractmethod
    def generate_signed_url(self, path: str, ttl_minutes: int = 15) -> str:
        """
        Generate a short-lived, read-only URL for a blob.

        Anyone holding the URL can read the blob until the URL expires.

        Args:
            path: Blob path
            ttl_minutes: URL lifetime in minutes

        Returns:
            Signed URL string
        """
        pass  # pragma: no cover

    @abstractmethod
    def get_updated_at(self, path: str) -> Optional[datetime]:
        """
        Last modification time of a blob (UTC).

        Returns:
            Timezone-aware datetime, or None if the blob doesn't exist
        """
        pass  # pragma: no cover

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check if a blob exists. Never raises for invalid paths."""
        pass  # pragma: no cover
