# src/conveyor/protocols.py
"""Protocols for the external collaborators of the queue writer.

The writer never imports the Azure SDK directly. It talks to a
ConnectionProvider to obtain a QueueClient and to the QueueClient to send
messages. conveyor.azure provides the Azure Storage implementations; tests
provide in-memory ones.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Protocol, runtime_checkable


@runtime_checkable
class QueueClient(Protocol):
    """Sends single messages to one queue.

    Implementations must be safe for concurrent send() calls.
    """

    def send(
        self,
        text: str,
        visibility_delay: timedelta,
        time_to_live: timedelta,
        timeout: float,
    ) -> str | None:
        """Enqueue one message.

        Returns:
            Message id assigned by the queue, if it reports one.

        Raises:
            QueueSendError: If the message was not accepted.
        """
        ...

    def close(self) -> None:
        """Release the underlying transport."""
        ...


@runtime_checkable
class ConnectionProvider(Protocol):
    """Produces queue clients for a storage account."""

    def get_queue_client(self, queue_name: str) -> QueueClient:
        """Resolve a queue by name.

        Raises:
            QueueResolutionError: If the queue cannot be reached or does not exist.
        """
        ...
