"""
Unit tests for the FileRecord entity.
"""

from datetime import datetime, timedelta, timezone

from dropzone.domain.file_storage.entities import FileRecord, utc_now
from dropzone.domain.file_storage.value_objects import FileName, Keyword

NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def _record(**overrides) -> FileRecord:
    record = FileRecord.create(
        Keyword("team-q1"), FileName("report.pdf"), "application/pdf", 2048, NOW
    )
    for key, value in overrides.items():
        setattr(record, key, value)
    return record


class TestFileRecordCreate:
    def test_expiry_is_exactly_24_hours_after_upload(self):
        record = _record()
        assert record.uploaded_at == NOW
        assert record.expires_at - record.uploaded_at == timedelta(hours=24)

    def test_blob_ref_is_keyword_slash_name(self):
        assert _record().blob_ref == "team-q1/report.pdf"

    def test_missing_content_type_defaults_to_octet_stream(self):
        record = FileRecord.create(
            Keyword("team-q1"), FileName("blob.bin"), None, 1, NOW
        )
        assert record.content_type == "application/octet-stream"

    def test_new_record_has_no_id(self):
        assert _record().id is None


class TestFileRecordLiveness:
    def test_live_before_expiry(self):
        record = _record()
        assert record.is_live(NOW + timedelta(hours=23, minutes=59))
        assert not record.is_expired(NOW)

    def test_expired_at_exact_expiry_instant(self):
        record = _record()
        assert not record.is_live(record.expires_at)
        assert record.is_expired(record.expires_at)

    def test_remaining_seconds(self):
        record = _record()
        assert record.get_remaining_seconds(NOW) == 24 * 3600
        assert record.get_remaining_seconds(NOW + timedelta(hours=25)) == 0
        assert record.get_remaining_time(NOW + timedelta(hours=25)) < timedelta(0)


class TestFileRecordSerialization:
    def test_round_trip_preserves_fields(self):
        record = _record(id="abc123")
        restored = FileRecord.from_dict(record.to_dict())
        assert restored == record

    def test_naive_timestamps_are_read_as_utc(self):
        data = _record(id="abc123").to_dict()
        data["uploaded_at"] = "2024-01-15T12:00:00"
        data["expires_at"] = "2024-01-16T12:00:00"
        restored = FileRecord.from_dict(data)
        assert restored.uploaded_at == NOW
        assert restored.expires_at.tzinfo is not None


def test_utc_now_is_timezone_aware():
    assert utc_now().tzinfo is not None
