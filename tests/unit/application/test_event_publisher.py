"""
Unit tests for EventPublisher

Handlers are dispatched by event type and its base classes; a failing
handler never reaches the publisher's caller.
"""

from unittest.mock import Mock

from dropzone.application.event_publisher import EventPublisher
from dropzone.domain.events import (
    DomainEvent,
    FileDeletedEvent,
    FileUploadedEvent,
    KeywordClearedEvent,
)
from tests.fixtures.mock_repositories import FrozenClock

NOW = FrozenClock().now


def _deleted_event():
    return FileDeletedEvent(
        aggregate_id="rec-1", occurred_at=NOW, keyword="team-q1", file_name="a.txt"
    )


class TestEventPublisher:
    def test_dispatches_to_exact_type(self):
        publisher = EventPublisher()
        handler = Mock()
        publisher.subscribe(FileDeletedEvent, handler)

        event = _deleted_event()
        publisher.publish(event)

        handler.assert_called_once_with(event)

    def test_ignores_unrelated_types(self):
        publisher = EventPublisher()
        handler = Mock()
        publisher.subscribe(FileUploadedEvent, handler)

        publisher.publish(_deleted_event())

        handler.assert_not_called()

    def test_base_class_subscribers_receive_subclasses(self):
        publisher = EventPublisher()
        calls = []
        publisher.subscribe(DomainEvent, lambda e: calls.append(("base", e)))
        publisher.subscribe(KeywordClearedEvent, lambda e: calls.append(("exact", e)))

        event = KeywordClearedEvent(
            aggregate_id="team-q1", occurred_at=NOW, records_deleted=1, blobs_deleted=1
        )
        publisher.publish(event)

        assert [kind for kind, _ in calls] == ["exact", "base"]

    def test_failing_handler_does_not_stop_others(self, caplog):
        publisher = EventPublisher()
        failing = Mock(side_effect=RuntimeError("boom"), __name__="failing")
        healthy = Mock()
        publisher.subscribe(FileDeletedEvent, failing)
        publisher.subscribe(FileDeletedEvent, healthy)

        publisher.publish(_deleted_event())

        healthy.assert_called_once()
        assert "boom" in caplog.text

    def test_publish_without_handlers(self):
        EventPublisher().publish(_deleted_event())
