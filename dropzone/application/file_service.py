"""
File Service

Application service exposing the shared-file use cases to the API and to
background tasks. Delegates every rule to FileLifecycleManager and shapes
results into serializable dictionaries.
"""

import logging
import zipfile
from dataclasses import dataclass, field
from io import BytesIO
from typing import Any, Dict, List, Optional

from dropzone.domain.errors import (
    DomainError,
    InvalidFileError,
    NotFoundError,
    StorageUnavailableError,
)
from dropzone.domain.file_storage.entities import FileRecord
from dropzone.domain.file_storage.services import FileLifecycleManager
from dropzone.domain.file_storage.value_objects import FileName, Keyword

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedFile:
    """
    A file received from a client, not yet validated.

    Attributes:
        file_name: Client-supplied file name
        content_type: Client-supplied MIME type (may be None)
        data: File content
    """
    file_name: str
    content_type: Optional[str]
    data: bytes


@dataclass(frozen=True)
class UploadItemResult:
    """
    Outcome of one file in an upload batch.

    Attributes:
        file_name: File name as submitted
        success: Whether the file was stored
        file: Serialized record (if successful)
        error: Error category value (if failed)
        message: Error message (if failed)
    """
    file_name: str
    success: bool
    file: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"file_name": self.file_name, "success": self.success}
        if self.success:
            data["file"] = self.file
        else:
            data["error"] = self.error
            data["message"] = self.message
        return data


@dataclass
class UploadReport:
    """Per-file breakdown of an upload batch."""
    keyword: str
    results: List[UploadItemResult] = field(default_factory=list)

    @property
    def uploaded(self) -> List[UploadItemResult]:
        return [result for result in self.results if result.success]

    @property
    def failed(self) -> List[UploadItemResult]:
        return [result for result in self.results if not result.success]

    @property
    def all_succeeded(self) -> bool:
        return bool(self.results) and not self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keyword": self.keyword,
            "uploaded_count": len(self.uploaded),
            "failed_count": len(self.failed),
            "results": [result.to_dict() for result in self.results],
        }


class FileService:
    """
    Application service for keyword-addressed file sharing.

    Used by:
    - API endpoints (upload, list, delete, download links, archives)
    - Celery tasks (periodic maintenance)
    """

    def __init__(self, lifecycle_manager: FileLifecycleManager):
        """
        Initialize File Service.

        Args:
            lifecycle_manager: Domain service owning the file lifecycle
        """
        self.lifecycle_manager = lifecycle_manager

    def _serialize(self, record: FileRecord) -> Dict[str, Any]:
        now = self.lifecycle_manager.clock()
        return {
            "id": record.id,
            "keyword": record.keyword,
            "file_name": record.file_name,
            "content_type": record.content_type,
            "size": record.size,
            "uploaded_at": record.uploaded_at.isoformat(),
            "expires_at": record.expires_at.isoformat(),
            "expires_in": record.get_remaining_seconds(now),
        }

    def upload_files(self, keyword: str, files: List[UploadedFile]) -> UploadReport:
        """
        Upload a batch of files under one keyword.

        Files are stored independently: one failing file does not prevent
        the others from being stored.

        Raises:
            InvalidKeywordError: If the keyword is malformed (whole batch rejected)
            InvalidFileError: If no files were provided
        """
        kw = Keyword(keyword)
        if not files:
            raise InvalidFileError("No files provided")

        report = UploadReport(keyword=kw.value)
        for uploaded in files:
            try:
                record = self.lifecycle_manager.upload(
                    kw.value,
                    uploaded.file_name,
                    uploaded.content_type,
                    uploaded.data,
                )
            except DomainError as e:
                logger.warning(
                    f"Upload of '{uploaded.file_name}' to keyword '{kw}' failed: {e}"
                )
                report.results.append(
                    UploadItemResult(
                        file_name=uploaded.file_name,
                        success=False,
                        error=e.category.value,
                        message=str(e),
                    )
                )
            else:
                report.results.append(
                    UploadItemResult(
                        file_name=uploaded.file_name,
                        success=True,
                        file=self._serialize(record),
                    )
                )

        return report

    def list_files(self, keyword: str) -> Dict[str, Any]:
        """List live files for a keyword, newest first."""
        kw = Keyword(keyword)
        records = self.lifecycle_manager.list_by_keyword(kw.value)
        return {
            "keyword": kw.value,
            "count": len(records),
            "files": [self._serialize(record) for record in records],
        }

    def delete_file(self, keyword: str, file_name: str) -> Dict[str, Any]:
        """
        Delete one live file.

        Raises:
            NotFoundError: If no live file exists
        """
        record = self.lifecycle_manager.delete_one(keyword, file_name)
        return {
            "keyword": record.keyword,
            "file_name": record.file_name,
            "deleted": True,
            "remaining_files": self.lifecycle_manager.count_live(record.keyword),
        }

    def delete_keyword(self, keyword: str) -> Dict[str, Any]:
        """Delete every file of a keyword. Idempotent."""
        kw = Keyword(keyword)
        count = self.lifecycle_manager.delete_all(kw.value)
        return {"keyword": kw.value, "deleted_count": count}

    def get_download_url(self, keyword: str, file_name: str) -> Dict[str, Any]:
        """
        Issue a short-lived signed download URL.

        Raises:
            NotFoundError: If no live file exists
        """
        kw = Keyword(keyword)
        name = FileName(file_name)
        ttl_minutes = self.lifecycle_manager.download_url_ttl_minutes
        url = self.lifecycle_manager.generate_download_url(
            kw.value, name.value, ttl_minutes
        )
        if url is None:
            raise NotFoundError(f"File '{name}' not found under keyword '{kw}'")
        return {
            "keyword": kw.value,
            "file_name": name.value,
            "download_url": url,
            "expires_in": ttl_minutes * 60,
        }

    def build_archive(self, keyword: str) -> bytes:
        """
        Build a ZIP (DEFLATE) of every live file of a keyword.

        Files whose blob has gone missing are skipped.

        Raises:
            NotFoundError: If the keyword has no live file with content
        """
        kw = Keyword(keyword)
        records = self.lifecycle_manager.list_by_keyword(kw.value)
        if not records:
            raise NotFoundError(f"No files found for keyword '{kw}'")

        buffer = BytesIO()
        written = 0
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
            for record in records:
                content = self.lifecycle_manager.get_content(record)
                if content is None:
                    logger.warning(
                        f"Skipping '{record.file_name}' in archive for '{kw}': "
                        f"blob {record.blob_ref} is missing"
                    )
                    continue
                with content:
                    archive.writestr(record.file_name, content.read())
                written += 1

        if not written:
            raise NotFoundError(f"No files found for keyword '{kw}'")

        logger.info(f"Built archive for keyword '{kw}' with {written} file(s)")
        return buffer.getvalue()

    def run_maintenance(self) -> Dict[str, Any]:
        """
        Run the expire sweep followed by orphan blob reclamation.

        A failing step is recorded in ``errors`` and does not skip the next.
        """
        stats: Dict[str, Any] = {
            "expired_files_removed": 0,
            "orphaned_blobs_reclaimed": 0,
            "errors": [],
        }

        try:
            stats["expired_files_removed"] = self.lifecycle_manager.expire_sweep()
        except StorageUnavailableError as e:
            error_msg = f"Expire sweep failed: {e}"
            logger.error(error_msg)
            stats["errors"].append(error_msg)

        try:
            stats["orphaned_blobs_reclaimed"] = (
                self.lifecycle_manager.reclaim_orphan_blobs()
            )
        except StorageUnavailableError as e:
            error_msg = f"Orphan blob reclamation failed: {e}"
            logger.error(error_msg)
            stats["errors"].append(error_msg)

        return stats
