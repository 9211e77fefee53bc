"""
Redis File Record Repository Implementation

Concrete Redis-based implementation of the FileRecordRepository interface.

Layout:
    file_record:{id}          JSON document per record
    keyword_files:{keyword}   sorted set of record ids, score = uploaded_at
    file_expiry               sorted set of record ids, score = expires_at

Documents and both indexes are written and removed in one MULTI/EXEC
transaction. Records carry no Redis TTL; the expire sweep is the only
purge path so blobs are never left behind by a silent key expiry.
"""

import json
import logging
import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from dropzone.domain.file_storage.entities import FileRecord
from dropzone.domain.file_storage.repositories import FileRecordRepository

logger = logging.getLogger(__name__)


class RedisFileRecordRepository(FileRecordRepository):
    """
    Redis-based implementation of FileRecordRepository.

    Indexed by keyword (for listing) and by expiry time (for the sweep).
    """

    def __init__(self, redis_repository):
        """
        Initialize with Redis repository.

        Args:
            redis_repository: RedisRepository instance from infrastructure layer
        """
        self.redis_repo = redis_repository
        self.record_prefix = "file_record"
        self.keyword_prefix = "keyword_files"
        self.expiry_index = "file_expiry"

    def _record_key(self, record_id: str) -> str:
        return f"{self.record_prefix}:{record_id}"

    def _keyword_key(self, keyword: str) -> str:
        return f"{self.keyword_prefix}:{keyword}"

    @staticmethod
    def _generate_id() -> str:
        return uuid.uuid4().hex

    def insert(self, record: FileRecord) -> str:
        """
        Insert a record and index it by keyword and expiry atomically.

        Returns:
            Generated record id
        """
        record_id = self._generate_id()
        data = record.to_dict()
        data["id"] = record_id

        make_key = self.redis_repo._make_key
        with self.redis_repo.transaction() as pipe:
            pipe.set(make_key(self._record_key(record_id)), json.dumps(data))
            pipe.zadd(
                make_key(self._keyword_key(record.keyword)),
                {record_id: record.uploaded_at.timestamp()},
            )
            pipe.zadd(
                make_key(self.expiry_index),
                {record_id: record.expires_at.timestamp()},
            )
            pipe.execute()

        return record_id

    def _load(self, record_ids: List[str]) -> Tuple[List[FileRecord], List[str]]:
        """
        Load records by id.

        Unreadable documents are logged and skipped; their ids are not
        reported as dangling since the document key still exists.

        Returns:
            Tuple of (records, ids whose document is gone)
        """
        documents = self.redis_repo.get_many(
            [self._record_key(record_id) for record_id in record_ids]
        )

        records = []
        dangling = []
        for record_id, document in zip(record_ids, documents):
            if document is None:
                dangling.append(record_id)
                continue
            try:
                records.append(FileRecord.from_dict(json.loads(document)))
            except (KeyError, TypeError, ValueError) as e:
                logger.error(f"Error deserializing file record {record_id}: {e}")
        return records, dangling

    def _prune_dangling(self, index_key: str, dangling: List[str]) -> None:
        if dangling:
            logger.debug(f"Pruning {len(dangling)} dangling ids from {index_key}")
            self.redis_repo.zremove(index_key, *dangling)

    def find_by_keyword(self, keyword: str) -> List[FileRecord]:
        """Retrieve every record for a keyword, newest first."""
        index_key = self._keyword_key(keyword)
        record_ids = self.redis_repo.zrange_members(index_key, newest_first=True)
        records, dangling = self._load(record_ids)
        self._prune_dangling(index_key, dangling)
        return records

    def find_live_by_keyword(self, keyword: str, now: datetime) -> List[FileRecord]:
        """Retrieve live records for a keyword, newest first."""
        return [
            record for record in self.find_by_keyword(keyword) if record.is_live(now)
        ]

    def find_live(
        self, keyword: str, file_name: str, now: datetime
    ) -> Optional[FileRecord]:
        """Retrieve the newest live record named ``file_name`` under a keyword."""
        for record in self.find_live_by_keyword(keyword, now):
            if record.file_name == file_name:
                return record
        return None

    def delete(self, record_id: str) -> bool:
        """
        Delete a record and its index entries.

        Returns:
            True if the document existed
        """
        data = self.redis_repo.get_json(self._record_key(record_id))

        make_key = self.redis_repo._make_key
        with self.redis_repo.transaction() as pipe:
            pipe.delete(make_key(self._record_key(record_id)))
            pipe.zrem(make_key(self.expiry_index), record_id)
            if data is not None:
                pipe.zrem(make_key(self._keyword_key(data["keyword"])), record_id)
            results = pipe.execute()

        return results[0] > 0

    def delete_by_keyword(self, keyword: str) -> int:
        """
        Delete every record for a keyword, live or expired.

        Returns:
            Number of documents deleted
        """
        index_key = self._keyword_key(keyword)
        record_ids = self.redis_repo.zrange_members(index_key)
        if not record_ids:
            return 0

        make_key = self.redis_repo._make_key
        with self.redis_repo.transaction() as pipe:
            for record_id in record_ids:
                pipe.delete(make_key(self._record_key(record_id)))
            pipe.zrem(make_key(self.expiry_index), *record_ids)
            pipe.delete(make_key(index_key))
            results = pipe.execute()

        return sum(1 for result in results[: len(record_ids)] if result > 0)

    def find_expired(self, now: datetime) -> List[FileRecord]:
        """Retrieve records with expires_at <= now, oldest expiry first."""
        record_ids = self.redis_repo.zrange_by_max_score(
            self.expiry_index, now.timestamp()
        )
        records, dangling = self._load(record_ids)
        self._prune_dangling(self.expiry_index, dangling)
        return records
