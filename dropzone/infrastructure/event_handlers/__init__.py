"""Infrastructure handlers subscribed to domain events."""

from .logging_handler import LoggingEventHandler

__all__ = ["LoggingEventHandler"]
