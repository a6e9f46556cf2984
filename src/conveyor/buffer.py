# src/conveyor/buffer.py
"""Buffer of messages waiting to be dispatched.

Not thread-safe. The writer is driven by one caller thread and dispatch
workers never append, so no locking is needed here.
"""

from __future__ import annotations

from conveyor.contracts import PendingMessage


class MessageBuffer:
    """Ordered, append-only buffer drained in whole batches.

    Usage:
        buffer = MessageBuffer(threshold=1000)
        buffer.append(message)
        if buffer.is_full():
            batch = buffer.drain()
    """

    def __init__(self, threshold: int) -> None:
        if threshold < 1:
            raise ValueError(f"threshold must be >= 1, got {threshold}")
        self._threshold = threshold
        self._messages: list[PendingMessage] = []

    @property
    def threshold(self) -> int:
        return self._threshold

    def append(self, message: PendingMessage) -> None:
        self._messages.append(message)

    def size(self) -> int:
        return len(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def is_full(self) -> bool:
        """True once the buffer holds at least threshold messages."""
        return len(self._messages) >= self._threshold

    def clear(self) -> None:
        self._messages = []

    def drain(self) -> list[PendingMessage]:
        """Return all buffered messages in append order and empty the buffer."""
        messages = self._messages
        self._messages = []
        return messages
