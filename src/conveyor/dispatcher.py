# src/conveyor/dispatcher.py
"""Concurrent fan-out of a buffered batch to a queue client.

Each message is its own request: one task per message, a single send
attempt with a fixed timeout, no retry. Failed sends are counted and
dropped. dispatch() returns only after every task in the batch has settled.
"""

from __future__ import annotations

import contextvars
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from threading import Lock

import structlog

from conveyor.contracts import DispatchReport, PendingMessage
from conveyor.errors import QueueSendError
from conveyor.outcome import OutcomeTracker
from conveyor.protocols import QueueClient

logger = structlog.get_logger(__name__)


class BatchDispatcher:
    """Sends batches of messages on a thread pool.

    The dispatcher is synchronous from the caller's perspective:
    dispatch() blocks until all sends for the batch have completed or
    failed. Calls are serialized so batch N settles before batch N+1
    starts.

    Usage:
        dispatcher = BatchDispatcher(max_workers=16, send_timeout=30)
        report = dispatcher.dispatch(buffer.drain(), queue_client, tracker)
        dispatcher.shutdown()
    """

    def __init__(self, max_workers: int, send_timeout: float) -> None:
        self._max_workers = max_workers
        self._send_timeout = send_timeout
        self._thread_pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="conveyor-send")
        self._batch_lock = Lock()
        self._shutdown = False

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def shutdown(self, wait: bool = True) -> None:
        self._shutdown = True
        self._thread_pool.shutdown(wait=wait)

    def dispatch(
        self,
        messages: list[PendingMessage],
        client: QueueClient | None,
        tracker: OutcomeTracker,
    ) -> DispatchReport:
        """Send every message and record each outcome in tracker.

        Args:
            messages: Batch taken from the buffer
            client: Queue to send to, or None when no queue could be resolved;
                in that case every message is rejected without a send attempt
            tracker: Receives one success or reject per message

        Returns:
            DispatchReport for the batch

        Raises:
            RuntimeError: If called after shutdown()
            Exception: Any non-transport error raised by the client is a bug
                and propagates once the whole batch has settled
        """
        if self._shutdown:
            raise RuntimeError("BatchDispatcher has been shut down")
        if not messages:
            return DispatchReport(submitted=0, sent=0, rejected=0, elapsed_ms=0.0)

        with self._batch_lock:
            return self._dispatch_locked(messages, client, tracker)

    def _dispatch_locked(
        self,
        messages: list[PendingMessage],
        client: QueueClient | None,
        tracker: OutcomeTracker,
    ) -> DispatchReport:
        start_time = time.perf_counter()

        if client is None:
            for _ in messages:
                tracker.record_reject()
            logger.error("No queue available, rejecting batch", rejected=len(messages))
            return DispatchReport(
                submitted=len(messages),
                sent=0,
                rejected=len(messages),
                elapsed_ms=(time.perf_counter() - start_time) * 1000,
            )

        # One context copy per task; the writer's log bindings live in it.
        futures: list[Future[bool]] = [
            self._thread_pool.submit(contextvars.copy_context().run, self._send_one, client, message, tracker) for message in messages
        ]

        # Barrier: every send settles before the batch is reported.
        wait(futures)

        sent = 0
        rejected = 0
        first_error: BaseException | None = None
        for future in futures:
            error = future.exception()
            if error is not None:
                if first_error is None:
                    first_error = error
                continue
            if future.result():
                sent += 1
            else:
                rejected += 1

        if first_error is not None:
            raise first_error

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.debug("Batch dispatched", submitted=len(messages), sent=sent, rejected=rejected, elapsed_ms=round(elapsed_ms, 2))
        return DispatchReport(submitted=len(messages), sent=sent, rejected=rejected, elapsed_ms=elapsed_ms)

    def _send_one(self, client: QueueClient, message: PendingMessage, tracker: OutcomeTracker) -> bool:
        """Make one send attempt. Returns True if the queue accepted it."""
        try:
            client.send(
                message.text,
                visibility_delay=message.visibility_delay,
                time_to_live=message.time_to_live,
                timeout=self._send_timeout,
            )
        except QueueSendError as e:
            # Only transport failures are rejects; anything else is a bug.
            tracker.record_reject()
            logger.error("Message send failed", error=str(e))
            return False
        tracker.record_success(message.record)
        return True
