# src/conveyor/writer.py
"""Batched queue writer with partial-failure accounting.

Lifecycle:
    1. QueueWriter(config, connection) - no I/O
    2. open(uid) - resolve the target queue, start a new result
    3. write(record) - buffer one message, dispatch when the buffer is full
    4. close() - dispatch what is left and return the final WriteResult

Error policy:
    - Queue resolution failure: raised if die_on_error, otherwise the writer
      enters DEGRADED and every dispatch re-attempts resolution; messages
      that still have no queue are counted as rejects
    - Record without message content: raised if die_on_error, otherwise
      logged and skipped (counted in total only)
    - Send failure: never raised; counted as a reject and dropped
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from contextlib import AbstractContextManager
from enum import StrEnum
from types import TracebackType
from typing import Any, Self

import structlog

from conveyor.buffer import MessageBuffer
from conveyor.config import QueueWriterConfig
from conveyor.contracts import MESSAGE_CONTENT_FIELD, DispatchReport, PendingMessage, WriteResult
from conveyor.dispatcher import BatchDispatcher
from conveyor.errors import MessageContentError, QueueResolutionError, WriterStateError
from conveyor.logging import writer_context
from conveyor.outcome import OutcomeTracker
from conveyor.protocols import ConnectionProvider, QueueClient

logger = structlog.get_logger(__name__)


class WriterState(StrEnum):
    """Lifecycle states of a QueueWriter."""

    UNOPENED = "unopened"
    OPEN = "open"
    DEGRADED = "degraded"
    CLOSED = "closed"


class QueueWriter:
    """Write records to a storage queue in concurrently dispatched batches.

    Driven by a single caller thread. Only the dispatch step is concurrent.

    Usage:
        writer = QueueWriter(QueueWriterConfig(queue_name="orders"), connection)
        writer.open("run-42")
        for record in records:
            writer.write(record)
        result = writer.close()
        confirmed = writer.successful_writes
    """

    def __init__(
        self,
        config: QueueWriterConfig,
        connection: ConnectionProvider,
        *,
        dispatcher: BatchDispatcher | None = None,
    ) -> None:
        self._config = config
        self._connection = connection
        self._dispatcher = dispatcher or BatchDispatcher(
            max_workers=config.max_workers,
            send_timeout=config.send_timeout_seconds,
        )
        self._buffer = MessageBuffer(threshold=config.batch_size)
        self._tracker = OutcomeTracker()
        self._queue: QueueClient | None = None
        self._state = WriterState.UNOPENED
        self._final_result: WriteResult | None = None
        self._uid: str | None = None

    @classmethod
    def from_dict(cls, config: dict[str, Any], connection: ConnectionProvider) -> Self:
        """Build a writer from raw option names (camelCase or snake_case)."""
        return cls(QueueWriterConfig.from_dict(config), connection)

    @property
    def config(self) -> QueueWriterConfig:
        return self._config

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def buffered_count(self) -> int:
        return self._buffer.size()

    @property
    def skipped_count(self) -> int:
        """Records dropped before send because they had no message content."""
        return self._tracker.skipped_count

    @property
    def result(self) -> WriteResult:
        """Current counters. Final once the writer is closed."""
        if self._final_result is not None:
            return self._final_result
        return self._tracker.snapshot()

    @property
    def successful_writes(self) -> tuple[Mapping[str, Any], ...]:
        """Input records whose message the queue confirmed."""
        return self._tracker.successful_records

    @property
    def rejected_writes(self) -> tuple[Mapping[str, Any], ...]:
        """Rejected records are not retained; always empty."""
        return ()

    def clean_writes(self) -> None:
        """Forget the successful records seen so far. Counters are kept."""
        self._tracker.clear_successful()

    # === Lifecycle ===

    def open(self, uid: str) -> None:
        """Start a session and resolve the target queue.

        A writer holds one session. A closed writer cannot be reopened;
        build a new QueueWriter to write again.

        Raises:
            WriterStateError: If the writer was already opened or closed
            QueueResolutionError: If the queue cannot be resolved and die_on_error is set
        """
        if self._state is not WriterState.UNOPENED:
            raise WriterStateError(f"Cannot open: QueueWriter is {self._state.value}")

        self._uid = uid
        self._tracker.reset(uid)
        self._buffer.clear()
        self._final_result = None
        with self._log_context():
            self._resolve_at_open()

    def write(self, record: Mapping[str, Any] | None) -> None:
        """Buffer one record for sending.

        None and empty records are ignored.

        Raises:
            WriterStateError: If the writer is not open
            MessageContentError: If the record has no message content and die_on_error is set
        """
        self._require_writable("write")
        if not record:
            return

        with self._log_context():
            self._accept(record)
            if self._buffer.is_full():
                self._dispatch()

    def flush(self) -> DispatchReport:
        """Dispatch everything currently buffered."""
        self._require_writable("flush")
        with self._log_context():
            return self._dispatch()

    def close(self) -> WriteResult:
        """Dispatch remaining messages, release the queue and return the final result.

        Calling close() again returns the same result.
        """
        if self._state is WriterState.CLOSED and self._final_result is not None:
            return self._final_result

        with self._log_context():
            try:
                if self._state in (WriterState.OPEN, WriterState.DEGRADED):
                    self._dispatch()
            finally:
                queue, self._queue = self._queue, None
                if queue is not None:
                    queue.close()
                self._dispatcher.shutdown()
                self._state = WriterState.CLOSED

            self._final_result = self._tracker.snapshot()
            logger.info(
                "Queue writer closed",
                total=self._final_result.total_count,
                success=self._final_result.success_count,
                reject=self._final_result.reject_count,
            )
        return self._final_result

    def __enter__(self) -> Self:
        self.open(uuid.uuid4().hex)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # === Internals ===

    def _log_context(self) -> AbstractContextManager[None]:
        return writer_context(self._config.queue_name, self._uid)

    def _require_writable(self, operation: str) -> None:
        if self._state not in (WriterState.OPEN, WriterState.DEGRADED):
            raise WriterStateError(f"Cannot {operation}: QueueWriter is {self._state.value}")

    def _resolve_at_open(self) -> None:
        try:
            self._queue = self._connection.get_queue_client(self._config.queue_name)
        except QueueResolutionError as e:
            logger.error("Queue resolution failed", error=str(e))
            if self._config.die_on_error:
                raise
            self._queue = None
            self._state = WriterState.DEGRADED
            logger.warning("Writer continuing in degraded state; sends will be rejected until the queue resolves")
            return

        self._state = WriterState.OPEN
        logger.info("Queue writer opened")

    def _accept(self, record: Mapping[str, Any]) -> None:
        self._tracker.record_accepted()

        content = record.get(MESSAGE_CONTENT_FIELD)
        if not isinstance(content, str):
            error = MessageContentError(MESSAGE_CONTENT_FIELD)
            logger.error("Record has no message content", error=str(error), field=MESSAGE_CONTENT_FIELD)
            if self._config.die_on_error:
                raise error
            self._tracker.record_skipped()
            return

        self._buffer.append(
            PendingMessage(
                text=content,
                time_to_live=self._config.time_to_live,
                visibility_delay=self._config.visibility_delay,
                record=record,
            )
        )

    def _dispatch(self) -> DispatchReport:
        messages = self._buffer.drain()
        if not messages:
            return DispatchReport(submitted=0, sent=0, rejected=0, elapsed_ms=0.0)
        if self._state is WriterState.DEGRADED:
            self._retry_resolution()
        return self._dispatcher.dispatch(messages, self._queue, self._tracker)

    def _retry_resolution(self) -> None:
        try:
            self._queue = self._connection.get_queue_client(self._config.queue_name)
        except QueueResolutionError as e:
            logger.error("Queue still unresolved", error=str(e))
            return
        self._state = WriterState.OPEN
        logger.info("Queue resolved, leaving degraded state")
