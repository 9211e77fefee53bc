"""
Domain Events

Immutable records of significant state changes in the domain.
Events decouple side effects (logging, notifications) from core business logic.
"""

from abc import ABC
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Attributes:
        aggregate_id: Id of the aggregate that generated the event
            (file record id, or keyword for keyword-wide events)
        occurred_at: Timestamp when the event occurred
    """
    aggregate_id: str
    occurred_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert event to dictionary for serialization.

        Returns:
            Dictionary representation of the event
        """
        return {
            "event_type": self.__class__.__name__,
            "aggregate_id": self.aggregate_id,
            "occurred_at": self.occurred_at.isoformat(),
        }


@dataclass(frozen=True)
class FileUploadedEvent(DomainEvent):
    """
    Event emitted when a file has been stored under a keyword.

    Attributes:
        aggregate_id: File record id
        keyword: Normalized keyword
        file_name: Stored file name
        size: Size in bytes
        expires_at: When the file expires
    """
    keyword: str
    file_name: str
    size: int
    expires_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "keyword": self.keyword,
            "file_name": self.file_name,
            "size": self.size,
            "expires_at": self.expires_at.isoformat(),
        })
        return base_dict


@dataclass(frozen=True)
class FileDeletedEvent(DomainEvent):
    """
    Event emitted when a single file has been deleted on request.

    Attributes:
        aggregate_id: File record id
        keyword: Normalized keyword
        file_name: Deleted file name
    """
    keyword: str
    file_name: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "keyword": self.keyword,
            "file_name": self.file_name,
        })
        return base_dict


@dataclass(frozen=True)
class KeywordClearedEvent(DomainEvent):
    """
    Event emitted when every file of a keyword has been deleted.

    Attributes:
        aggregate_id: Normalized keyword
        records_deleted: Metadata records removed
        blobs_deleted: Blobs removed
    """
    records_deleted: int
    blobs_deleted: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "records_deleted": self.records_deleted,
            "blobs_deleted": self.blobs_deleted,
        })
        return base_dict


@dataclass(frozen=True)
class ExpireSweepCompletedEvent(DomainEvent):
    """
    Event emitted after an expire sweep pass.

    Attributes:
        aggregate_id: Always "expire-sweep"
        expired_found: Expired records found at sweep time
        records_removed: Metadata records removed
        blob_failures: Blob deletions that failed (non-fatal)
    """
    expired_found: int
    records_removed: int
    blob_failures: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "expired_found": self.expired_found,
            "records_removed": self.records_removed,
            "blob_failures": self.blob_failures,
        })
        return base_dict


@dataclass(frozen=True)
class OrphanBlobsReclaimedEvent(DomainEvent):
    """
    Event emitted after orphan blobs (blobs without metadata) were reclaimed.

    Attributes:
        aggregate_id: Always "orphan-sweep"
        blobs_reclaimed: Blobs deleted
    """
    blobs_reclaimed: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict["blobs_reclaimed"] = self.blobs_reclaimed
        return base_dict
