# src/conveyor/outcome.py
"""Thread-safe bookkeeping of per-message send outcomes."""

from __future__ import annotations

from collections.abc import Mapping
from threading import Lock
from typing import Any

from conveyor.contracts import WriteResult


class OutcomeTracker:
    """Counters and successful records for one writer session.

    record_success() and record_reject() are called from dispatch worker
    threads; every mutation happens under a single lock so a success count
    and its retained record are always updated together.

    Counters only ever increase. reset() starts a new session.
    """

    def __init__(self, uid: str = "") -> None:
        self._lock = Lock()
        self._uid = uid
        self._total = 0
        self._success = 0
        self._reject = 0
        self._skipped = 0
        self._successful_records: list[Mapping[str, Any]] = []

    def reset(self, uid: str) -> None:
        with self._lock:
            self._uid = uid
            self._total = 0
            self._success = 0
            self._reject = 0
            self._skipped = 0
            self._successful_records = []

    def record_accepted(self) -> None:
        """Count a non-empty record handed to write()."""
        with self._lock:
            self._total += 1

    def record_skipped(self) -> None:
        """Count a record dropped before send (no message content)."""
        with self._lock:
            self._skipped += 1

    def record_success(self, record: Mapping[str, Any]) -> None:
        with self._lock:
            self._success += 1
            self._successful_records.append(record)

    def record_reject(self) -> None:
        with self._lock:
            self._reject += 1

    def clear_successful(self) -> None:
        with self._lock:
            self._successful_records = []

    @property
    def successful_records(self) -> tuple[Mapping[str, Any], ...]:
        with self._lock:
            return tuple(self._successful_records)

    @property
    def skipped_count(self) -> int:
        with self._lock:
            return self._skipped

    def snapshot(self) -> WriteResult:
        with self._lock:
            return WriteResult(
                uid=self._uid,
                total_count=self._total,
                success_count=self._success,
                reject_count=self._reject,
            )
