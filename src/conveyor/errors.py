# src/conveyor/errors.py
"""Exception types raised by the queue writer and its Azure adapters.

Recoverable conditions (a rejected send, a record without content when
die_on_error is off) never surface as exceptions to the caller; they are
absorbed by the writer and reflected in the WriteResult counters and logs.
The types here are what callers see when a condition is fatal.
"""

from __future__ import annotations


class ConveyorError(Exception):
    """Base class for all conveyor errors."""


class WriterConfigError(ConveyorError):
    """Raised when writer or auth configuration is invalid."""


class WriterStateError(ConveyorError):
    """Raised when a writer operation is called in the wrong lifecycle state."""


class QueueResolutionError(ConveyorError):
    """Raised when the target queue cannot be obtained.

    Covers connectivity, authentication and missing-queue failures.

    Attributes:
        queue_name: Name of the queue that could not be resolved
    """

    def __init__(self, queue_name: str, message: str) -> None:
        super().__init__(message)
        self.queue_name = queue_name


class MessageContentError(ConveyorError):
    """Raised when a record has no usable message content field."""

    def __init__(self, field_name: str, message: str | None = None) -> None:
        super().__init__(message or f"Record has no '{field_name}' field; nothing to enqueue")
        self.field_name = field_name


class QueueSendError(ConveyorError):
    """Raised by a queue client when a single message send fails.

    The dispatcher counts these as rejects. They are never retried.
    """


class ConnectionValidationError(ConveyorError):
    """Raised when a storage account connection cannot be used."""
