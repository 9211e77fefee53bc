"""
Redis File Record Repository Integration Tests

Runs RedisFileRecordRepository against a real Redis instance: indexes,
ordering, expiry queries and deletion.
"""

from datetime import datetime, timedelta, timezone

import pytest

from dropzone.domain.file_storage.entities import FileRecord
from dropzone.domain.file_storage.value_objects import FileName, Keyword
from dropzone.infrastructure.redis_file_record_repository import (
    RedisFileRecordRepository,
)
from dropzone.infrastructure.redis_repository import RedisRepository

NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def _record(keyword="team-q1", name="report.pdf", uploaded_at=NOW) -> FileRecord:
    return FileRecord.create(
        Keyword(keyword), FileName(name), "application/pdf", 2048, uploaded_at
    )


@pytest.fixture
def repository(redis_client):
    return RedisFileRecordRepository(RedisRepository(redis_client, key_prefix="test"))


class TestRedisFileRecordRepository:
    def test_insert_and_find_by_keyword(self, repository):
        first = repository.insert(_record(name="a.txt"))
        second = repository.insert(_record(name="b.txt", uploaded_at=NOW + timedelta(seconds=1)))

        records = repository.find_by_keyword("team-q1")

        assert [r.id for r in records] == [second, first]
        assert records[0].uploaded_at == NOW + timedelta(seconds=1)
        assert records[1].expires_at == NOW + timedelta(hours=24)

    def test_keywords_are_isolated(self, repository):
        repository.insert(_record(keyword="team-q1"))
        repository.insert(_record(keyword="team-q2"))

        assert len(repository.find_by_keyword("team-q1")) == 1
        assert repository.find_by_keyword("nobody") == []

    def test_find_live_and_expired(self, repository):
        old_id = repository.insert(_record(name="old.txt", uploaded_at=NOW - timedelta(hours=25)))
        live_id = repository.insert(_record(name="new.txt"))

        assert [r.id for r in repository.find_live_by_keyword("team-q1", NOW)] == [live_id]
        assert repository.find_live("team-q1", "old.txt", NOW) is None
        assert repository.find_live("team-q1", "new.txt", NOW).id == live_id
        assert [r.id for r in repository.find_expired(NOW)] == [old_id]

    def test_expiry_boundary_is_inclusive(self, repository):
        record_id = repository.insert(_record(uploaded_at=NOW - timedelta(hours=24)))
        assert [r.id for r in repository.find_expired(NOW)] == [record_id]

    def test_delete_removes_from_every_index(self, repository, redis_client):
        record_id = repository.insert(_record(uploaded_at=NOW - timedelta(hours=25)))

        assert repository.delete(record_id) is True
        assert repository.delete(record_id) is False
        assert repository.find_by_keyword("team-q1") == []
        assert repository.find_expired(NOW) == []
        assert redis_client.zcard("test:file_expiry") == 0

    def test_delete_by_keyword(self, repository):
        repository.insert(_record(name="a.txt"))
        repository.insert(_record(name="b.txt"))
        other = repository.insert(_record(keyword="team-q2"))

        assert repository.delete_by_keyword("team-q1") == 2
        assert repository.delete_by_keyword("team-q1") == 0
        assert [r.id for r in repository.find_by_keyword("team-q2")] == [other]

    def test_dangling_index_entries_are_pruned(self, repository, redis_client):
        record_id = repository.insert(_record())
        redis_client.delete(f"test:file_record:{record_id}")

        assert repository.find_by_keyword("team-q1") == []
        assert redis_client.zcard("test:keyword_files:team-q1") == 0

    def test_records_have_no_redis_ttl(self, repository, redis_client):
        record_id = repository.insert(_record())
        assert redis_client.ttl(f"test:file_record:{record_id}") == -1
