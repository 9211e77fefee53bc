"""
Logging Event Handler

Infrastructure event handler for logging domain events.
Domain layer remains unaware of logging infrastructure.
"""

import logging

from dropzone.domain.events import (
    DomainEvent,
    ExpireSweepCompletedEvent,
    FileDeletedEvent,
    FileUploadedEvent,
    KeywordClearedEvent,
    OrphanBlobsReclaimedEvent,
)


class LoggingEventHandler:
    """
    Infrastructure event handler for logging domain events.

    Subscribes to domain events and logs them appropriately.
    """

    def __init__(self, logger: logging.Logger):
        """
        Initialize with logger instance.

        Args:
            logger: Python logging.Logger instance
        """
        self.logger = logger

    def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event by logging it.

        Args:
            event: Domain event to log
        """
        try:
            if isinstance(event, FileUploadedEvent):
                self._handle_file_uploaded(event)
            elif isinstance(event, FileDeletedEvent):
                self._handle_file_deleted(event)
            elif isinstance(event, KeywordClearedEvent):
                self._handle_keyword_cleared(event)
            elif isinstance(event, ExpireSweepCompletedEvent):
                self._handle_sweep_completed(event)
            elif isinstance(event, OrphanBlobsReclaimedEvent):
                self._handle_orphans_reclaimed(event)
            else:
                self.logger.debug(
                    f"Unhandled event: {event.__class__.__name__} "
                    f"(aggregate_id={event.aggregate_id})"
                )
        except Exception as e:
            # Log handler errors but don't fail the operation
            self.logger.error(
                f"Error in logging event handler for {event.__class__.__name__}: {e}",
                exc_info=True,
            )

    def _handle_file_uploaded(self, event: FileUploadedEvent) -> None:
        self.logger.info(
            f"File uploaded: id={event.aggregate_id}, keyword={event.keyword}, "
            f"file_name={event.file_name}, size={event.size} bytes, "
            f"expires_at={event.expires_at.isoformat()}"
        )

    def _handle_file_deleted(self, event: FileDeletedEvent) -> None:
        self.logger.info(
            f"File deleted: id={event.aggregate_id}, keyword={event.keyword}, "
            f"file_name={event.file_name}"
        )

    def _handle_keyword_cleared(self, event: KeywordClearedEvent) -> None:
        self.logger.info(
            f"Keyword cleared: keyword={event.aggregate_id}, "
            f"records={event.records_deleted}, blobs={event.blobs_deleted}"
        )

    def _handle_sweep_completed(self, event: ExpireSweepCompletedEvent) -> None:
        """Quiet sweeps log at DEBUG; blob failures raise the level to WARNING."""
        message = (
            f"Expire sweep completed: found={event.expired_found}, "
            f"removed={event.records_removed}, blob_failures={event.blob_failures}"
        )
        if event.blob_failures:
            self.logger.warning(message)
        elif event.expired_found:
            self.logger.info(message)
        else:
            self.logger.debug(message)

    def _handle_orphans_reclaimed(self, event: OrphanBlobsReclaimedEvent) -> None:
        self.logger.info(f"Orphan blobs reclaimed: count={event.blobs_reclaimed}")
