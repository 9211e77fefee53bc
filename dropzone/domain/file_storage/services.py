"""
File Storage Services

Domain service coordinating file record metadata with blob content.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Set

from ..errors import (
    FileTooLargeError,
    InvalidFileError,
    NotFoundError,
    ConflictError,
    StorageUnavailableError,
    ValidationError,
)
from ..events import (
    ExpireSweepCompletedEvent,
    FileDeletedEvent,
    FileUploadedEvent,
    KeywordClearedEvent,
    OrphanBlobsReclaimedEvent,
)
from .entities import FileRecord, utc_now
from .repositories import FileRecordRepository
from .storage_repository import IBlobStorageRepository
from .value_objects import (
    DEFAULT_DOWNLOAD_URL_TTL_MINUTES,
    MAX_FILE_SIZE,
    FileName,
    Keyword,
)

logger = logging.getLogger(__name__)

DEFAULT_ORPHAN_GRACE = timedelta(hours=1)


class FileLifecycleManager:
    """
    Domain service for the shared file lifecycle.

    The single authority for keeping file record metadata and blob bytes
    consistent, and for enforcing keyword/file name rules and the 24 hour
    retention. Operations are sequenced across the two stores but are not
    atomic: uploads write the blob before the metadata record, so a failure
    in between leaves an orphan blob that reclaim_orphan_blobs() removes.

    Expiry is computed from timestamps at call time. This service owns no
    timers and keeps no state between calls.
    """

    def __init__(
        self,
        file_repository: FileRecordRepository,
        storage_repository: IBlobStorageRepository,
        event_publisher=None,
        clock: Callable[[], datetime] = utc_now,
        max_file_size: int = MAX_FILE_SIZE,
        download_url_ttl_minutes: int = DEFAULT_DOWNLOAD_URL_TTL_MINUTES,
        orphan_grace: timedelta = DEFAULT_ORPHAN_GRACE,
    ):
        """
        Initialize FileLifecycleManager.

        Args:
            file_repository: Metadata store for file records
            storage_repository: Blob store for file content
            event_publisher: Optional publisher for domain events
            clock: Callable returning the current UTC time
            max_file_size: Per-file size cap in bytes
            download_url_ttl_minutes: Default signed URL lifetime
            orphan_grace: Minimum blob age before it can be reclaimed as orphan
        """
        self.file_repo = file_repository
        self.storage = storage_repository
        self.event_publisher = event_publisher
        self.clock = clock
        self.max_file_size = max_file_size
        self.download_url_ttl_minutes = download_url_ttl_minutes
        self.orphan_grace = orphan_grace

    # ------------------------------------------------------------------
    # Lifecycle operations
    # ------------------------------------------------------------------

    def upload(
        self,
        keyword: str,
        file_name: str,
        content_type: Optional[str],
        data: bytes,
        size: Optional[int] = None,
    ) -> FileRecord:
        """
        Store a file under a keyword.

        Args:
            keyword: Raw keyword (normalized here)
            file_name: File name, unique among live files of the keyword
            content_type: MIME type (informational)
            data: File content
            size: Declared size; must match len(data) when given

        Returns:
            The created FileRecord with its store-assigned id

        Raises:
            InvalidKeywordError: If the keyword is malformed
            InvalidFileNameError: If the file name is unusable
            InvalidFileError: If size doesn't match the payload
            FileTooLargeError: If the payload exceeds the size cap
            ConflictError: If a live file with this name exists
            StorageUnavailableError: If either store fails
        """
        kw = Keyword(keyword)
        name = FileName(file_name)

        actual_size = len(data)
        if size is not None and size != actual_size:
            raise InvalidFileError(
                f"Declared size {size} does not match payload length {actual_size}"
            )
        if actual_size > self.max_file_size:
            raise FileTooLargeError(
                f"File '{name}' exceeds the maximum size of "
                f"{self.max_file_size} bytes"
            )

        with self._storage_call("ensure blob container"):
            self.storage.ensure_container()

        with self._storage_call("check for existing file"):
            existing = self.file_repo.find_live(kw.value, name.value, self.clock())
        if existing is not None:
            raise ConflictError(
                f"A file named '{name}' already exists for keyword '{kw}'"
            )

        record = FileRecord.create(kw, name, content_type, actual_size, self.clock())

        with self._storage_call(f"write blob {record.blob_ref}"):
            self.storage.put(record.blob_ref, data, record.content_type)

        # Blob is written; a failure below leaves an orphan blob
        with self._storage_call(f"insert metadata for {record.blob_ref}"):
            record.id = self.file_repo.insert(record)

        logger.info(
            f"Stored '{record.file_name}' ({record.size} bytes) under keyword "
            f"'{record.keyword}' until {record.expires_at.isoformat()}"
        )
        self._publish(
            FileUploadedEvent(
                aggregate_id=record.id,
                occurred_at=record.uploaded_at,
                keyword=record.keyword,
                file_name=record.file_name,
                size=record.size,
                expires_at=record.expires_at,
            )
        )
        return record

    def list_by_keyword(self, keyword: str) -> List[FileRecord]:
        """
        List live files for a keyword, newest first.

        An unknown keyword and a keyword with no live files both return an
        empty list.

        Raises:
            InvalidKeywordError: If the keyword is malformed
            StorageUnavailableError: If the metadata store fails
        """
        kw = Keyword(keyword)
        now = self.clock()

        with self._storage_call(f"list files for keyword {kw}"):
            records = self.file_repo.find_live_by_keyword(kw.value, now)

        return [record for record in records if record.is_live(now)]

    def count_live(self, keyword: str) -> int:
        """Number of live files for a keyword."""
        return len(self.list_by_keyword(keyword))

    def delete_one(self, keyword: str, file_name: str) -> FileRecord:
        """
        Delete a single live file: blob first, then metadata.

        Not idempotent: deleting the same file twice raises NotFoundError
        the second time.

        Returns:
            The deleted FileRecord

        Raises:
            NotFoundError: If no live record exists
            StorageUnavailableError: If either store fails
        """
        kw = Keyword(keyword)
        name = FileName(file_name)

        with self._storage_call(f"look up {kw}/{name}"):
            record = self.file_repo.find_live(kw.value, name.value, self.clock())
        if record is None:
            raise NotFoundError(f"File '{name}' not found under keyword '{kw}'")

        with self._storage_call(f"delete blob {record.blob_ref}"):
            self.storage.delete(record.blob_ref)

        with self._storage_call(f"delete metadata for {record.blob_ref}"):
            deleted = self.file_repo.delete(record.id)
        if not deleted:
            # Removed concurrently by another delete or the sweep
            raise NotFoundError(f"File '{name}' not found under keyword '{kw}'")

        logger.info(f"Deleted '{record.file_name}' from keyword '{record.keyword}'")
        self._publish(
            FileDeletedEvent(
                aggregate_id=record.id,
                occurred_at=self.clock(),
                keyword=record.keyword,
                file_name=record.file_name,
            )
        )
        return record

    def delete_all(self, keyword: str) -> int:
        """
        Delete every blob under the keyword prefix and every metadata record
        of the keyword, live or expired.

        Idempotent: a keyword with nothing stored returns 0.

        Returns:
            Number of metadata records removed

        Raises:
            StorageUnavailableError: If either store fails
        """
        kw = Keyword(keyword)

        with self._storage_call(f"list blobs for keyword {kw}"):
            paths = self.storage.list_paths(kw.blob_prefix)

        for path in paths:
            with self._storage_call(f"delete blob {path}"):
                self.storage.delete(path)

        with self._storage_call(f"delete metadata for keyword {kw}"):
            count = self.file_repo.delete_by_keyword(kw.value)

        if count or paths:
            logger.info(
                f"Cleared keyword '{kw}': {count} records, {len(paths)} blobs"
            )
            self._publish(
                KeywordClearedEvent(
                    aggregate_id=kw.value,
                    occurred_at=self.clock(),
                    records_deleted=count,
                    blobs_deleted=len(paths),
                )
            )
        return count

    def generate_download_url(
        self, keyword: str, file_name: str, ttl_minutes: Optional[int] = None
    ) -> Optional[str]:
        """
        Generate a short-lived signed URL for a live file.

        The URL stays valid for its own lifetime even if the file is deleted
        or expires in the meantime.

        Returns:
            Signed URL, or None when no live file exists

        Raises:
            ValidationError: If ttl_minutes is not positive
            StorageUnavailableError: If either store fails
        """
        kw = Keyword(keyword)
        name = FileName(file_name)
        ttl = ttl_minutes if ttl_minutes is not None else self.download_url_ttl_minutes
        if ttl <= 0:
            raise ValidationError(f"Download URL lifetime must be positive, got {ttl}")

        with self._storage_call(f"look up {kw}/{name}"):
            record = self.file_repo.find_live(kw.value, name.value, self.clock())
        if record is None:
            return None

        with self._storage_call(f"sign URL for {record.blob_ref}"):
            return self.storage.generate_signed_url(record.blob_ref, ttl)

    def get_content(self, record: FileRecord):
        """
        Open the blob content of a record.

        Returns:
            Binary stream, or None if the blob is missing
        """
        with self._storage_call(f"read blob {record.blob_ref}"):
            return self.storage.get(record.blob_ref)

    # ------------------------------------------------------------------
    # Sweeps
    # ------------------------------------------------------------------

    def expire_sweep(self) -> int:
        """
        Purge every expired record and its blob.

        Blob deletion is best-effort: failures are logged and the sweep moves
        on. A blob is kept when a live record has reused the same file name,
        since both records point at the same path. Safe to run repeatedly.

        Returns:
            Number of metadata records removed

        Raises:
            StorageUnavailableError: If expired records cannot be listed
        """
        now = self.clock()

        with self._storage_call("find expired records"):
            expired = self.file_repo.find_expired(now)

        removed = 0
        blob_failures = 0

        for record in expired:
            if self._has_live_successor(record, now):
                logger.debug(
                    f"Keeping blob {record.blob_ref}: reused by a live record"
                )
            else:
                try:
                    self.storage.delete(record.blob_ref)
                except (StorageUnavailableError, OSError) as e:
                    blob_failures += 1
                    logger.warning(
                        f"Failed to delete expired blob {record.blob_ref}: {e}"
                    )

            try:
                if self.file_repo.delete(record.id):
                    removed += 1
            except StorageUnavailableError as e:
                logger.error(
                    f"Failed to delete expired record {record.id} "
                    f"({record.blob_ref}): {e}"
                )

        if expired:
            logger.info(
                f"Expire sweep removed {removed}/{len(expired)} records "
                f"({blob_failures} blob failures)"
            )
        self._publish(
            ExpireSweepCompletedEvent(
                aggregate_id="expire-sweep",
                occurred_at=now,
                expired_found=len(expired),
                records_removed=removed,
                blob_failures=blob_failures,
            )
        )
        return removed

    def reclaim_orphan_blobs(self, min_age: Optional[timedelta] = None) -> int:
        """
        Delete blobs that have no metadata record.

        Orphans come from uploads whose metadata insert failed after the blob
        write. Blobs younger than ``min_age`` are left alone so uploads in
        flight are not reclaimed. Paths that are not ``keyword/file_name``
        are ignored.

        Returns:
            Number of blobs deleted
        """
        now = self.clock()
        min_age = min_age if min_age is not None else self.orphan_grace

        with self._storage_call("list blobs"):
            paths = self.storage.list_paths("")

        known: Dict[str, Set[str]] = {}
        reclaimed = 0

        for path in paths:
            keyword, sep, file_name = path.partition("/")
            if not sep or not file_name or "/" in file_name:
                continue

            if keyword not in known:
                with self._storage_call(f"list metadata for keyword {keyword}"):
                    records = self.file_repo.find_by_keyword(keyword)
                known[keyword] = {record.file_name for record in records}

            if file_name in known[keyword]:
                continue

            try:
                updated_at = self.storage.get_updated_at(path)
                if updated_at is None or now - updated_at < min_age:
                    continue
                self.storage.delete(path)
                reclaimed += 1
                logger.info(f"Reclaimed orphan blob {path}")
            except (StorageUnavailableError, OSError) as e:
                logger.warning(f"Failed to reclaim orphan blob {path}: {e}")

        if reclaimed:
            self._publish(
                OrphanBlobsReclaimedEvent(
                    aggregate_id="orphan-sweep",
                    occurred_at=now,
                    blobs_reclaimed=reclaimed,
                )
            )
        return reclaimed

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _has_live_successor(self, record: FileRecord, now: datetime) -> bool:
        try:
            live = self.file_repo.find_live(record.keyword, record.file_name, now)
        except StorageUnavailableError:
            # Unknown: keep the blob, the orphan sweep can reclaim it later
            return True
        return live is not None and live.id != record.id

    @contextmanager
    def _storage_call(self, description: str):
        """Translate low-level I/O failures into StorageUnavailableError."""
        try:
            yield
        except StorageUnavailableError:
            logger.error(f"Storage unavailable during: {description}")
            raise
        except OSError as e:
            logger.error(f"Storage failure during {description}: {e}", exc_info=True)
            raise StorageUnavailableError(f"Failed to {description}: {e}", e) from e

    def _publish(self, event) -> None:
        if self.event_publisher is not None:
            self.event_publisher.publish(event)
