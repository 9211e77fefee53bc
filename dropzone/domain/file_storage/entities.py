"""
File Storage Entities

Domain entities for shared file management.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from .value_objects import FILE_TTL, FileName, Keyword, blob_path


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class FileRecord:
    """
    Entity representing one shared file under a keyword.

    Records are immutable once stored. ``expires_at`` is always exactly
    ``FILE_TTL`` after ``uploaded_at`` and is the only expiry signal: a record
    is live while ``expires_at > now`` and expired from then on.
    """

    keyword: str
    file_name: str
    content_type: str
    size: int
    blob_ref: str
    uploaded_at: datetime
    expires_at: datetime
    id: Optional[str] = None

    @classmethod
    def create(
        cls,
        keyword: Keyword,
        file_name: FileName,
        content_type: Optional[str],
        size: int,
        now: datetime,
    ) -> "FileRecord":
        """
        Factory method to create a new, not yet persisted record.

        Args:
            keyword: Normalized keyword
            file_name: Validated file name
            content_type: MIME type reported by the client (informational)
            size: Payload length in bytes
            now: Upload timestamp

        Returns:
            New FileRecord without an id
        """
        return cls(
            keyword=keyword.value,
            file_name=file_name.value,
            content_type=content_type or "application/octet-stream",
            size=size,
            blob_ref=blob_path(keyword, file_name),
            uploaded_at=now,
            expires_at=now + FILE_TTL,
        )

    def is_live(self, now: datetime) -> bool:
        """True while the record has not reached its expiry."""
        return self.expires_at > now

    def is_expired(self, now: datetime) -> bool:
        return not self.is_live(now)

    def get_remaining_time(self, now: datetime) -> timedelta:
        """Remaining time until expiry (negative once expired)."""
        return self.expires_at - now

    def get_remaining_seconds(self, now: datetime) -> int:
        """Remaining seconds until expiry (0 if expired)."""
        return max(0, int(self.get_remaining_time(now).total_seconds()))

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "keyword": self.keyword,
            "file_name": self.file_name,
            "content_type": self.content_type,
            "size": self.size,
            "blob_ref": self.blob_ref,
            "uploaded_at": self.uploaded_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FileRecord":
        """Create FileRecord from dictionary."""
        return cls(
            id=data.get("id"),
            keyword=data["keyword"],
            file_name=data["file_name"],
            content_type=data.get("content_type") or "application/octet-stream",
            size=int(data["size"]),
            blob_ref=data["blob_ref"],
            uploaded_at=_parse_timestamp(data["uploaded_at"]),
            expires_at=_parse_timestamp(data["expires_at"]),
        )
