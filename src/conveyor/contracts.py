# src/conveyor/contracts.py
"""Data types shared between the writer, buffer, dispatcher and tracker."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

# Required record field holding the text to enqueue.
MESSAGE_CONTENT_FIELD = "messageContent"


@dataclass(frozen=True)
class PendingMessage:
    """A message accepted by write() and waiting for dispatch.

    Attributes:
        text: Message body sent to the queue
        time_to_live: How long the queue keeps the message (-1s = forever)
        visibility_delay: Delay before consumers can see the message
        record: The input record the message was built from
    """

    text: str
    time_to_live: timedelta
    visibility_delay: timedelta
    record: Mapping[str, Any] = field(repr=False, compare=False)


@dataclass(frozen=True)
class WriteResult:
    """Aggregate outcome of a writer session.

    Snapshot; the live counters belong to OutcomeTracker.
    """

    uid: str
    total_count: int = 0
    success_count: int = 0
    reject_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "uid": self.uid,
            "totalCount": self.total_count,
            "successCount": self.success_count,
            "rejectCount": self.reject_count,
        }


@dataclass(frozen=True)
class DispatchReport:
    """Outcome of a single dispatch round.

    Attributes:
        submitted: Messages taken from the buffer
        sent: Messages the queue accepted
        rejected: Messages that failed to send (or had no queue to go to)
        elapsed_ms: Wall time from first submit to barrier
    """

    submitted: int
    sent: int
    rejected: int
    elapsed_ms: float
