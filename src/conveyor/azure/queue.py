# src/conveyor/azure/queue.py
"""Azure Storage Queue adapters for QueueWriter.

Three-tier trust model:
    - Azure Queue SDK calls = EXTERNAL SYSTEM -> wrap with try/except
    - Message construction = OUR CODE -> let it crash
    - Internal state = OUR CODE -> let it crash
"""

from __future__ import annotations

from datetime import timedelta
from threading import Lock
from typing import TYPE_CHECKING

import structlog
from azure.core.exceptions import AzureError, ResourceNotFoundError

from conveyor.azure.auth import AzureAuthConfig
from conveyor.errors import QueueResolutionError, QueueSendError

if TYPE_CHECKING:
    from azure.storage.queue import QueueClient as SdkQueueClient
    from azure.storage.queue import QueueServiceClient

logger = structlog.get_logger(__name__)


class AzureQueueClient:
    """QueueClient backed by azure.storage.queue.QueueClient.

    The SDK client is safe for concurrent send_message() calls.
    """

    def __init__(self, client: SdkQueueClient) -> None:
        self._client = client

    @property
    def queue_name(self) -> str:
        return self._client.queue_name

    def send(
        self,
        text: str,
        visibility_delay: timedelta,
        time_to_live: timedelta,
        timeout: float,
    ) -> str | None:
        """Enqueue one message with a single attempt.

        timeout bounds both the server-side operation and the client-side
        connect and read waits. The service client is built with retries
        disabled (see AzureAuthConfig), so a failure is reported after one
        request.

        Raises:
            QueueSendError: On any Azure SDK error, including timeouts.
        """
        try:
            message = self._client.send_message(
                text,
                visibility_timeout=int(visibility_delay.total_seconds()),
                time_to_live=int(time_to_live.total_seconds()),
                timeout=max(1, int(timeout)),
                connection_timeout=timeout,
                read_timeout=timeout,
            )
        except AzureError as e:
            raise QueueSendError(f"Failed to send message to queue '{self.queue_name}': {e}") from e
        return message.id

    def close(self) -> None:
        self._client.close()


class AzureQueueConnection:
    """ConnectionProvider for an Azure Storage account.

    The service client is created lazily on first resolution and shared by
    every queue client handed out.
    """

    def __init__(self, auth: AzureAuthConfig) -> None:
        self._auth = auth
        self._service_client: QueueServiceClient | None = None
        self._lock = Lock()

    def _get_service_client(self) -> QueueServiceClient:
        with self._lock:
            if self._service_client is None:
                self._service_client = self._auth.create_queue_service_client()
            return self._service_client

    def get_queue_client(self, queue_name: str) -> AzureQueueClient:
        """Resolve queue_name and confirm it exists.

        Raises:
            ImportError: If azure-storage-queue is not installed.
            QueueResolutionError: If the account is unreachable, credentials
                are rejected, or the queue does not exist.
        """
        try:
            service_client = self._get_service_client()
            sdk_client = service_client.get_queue_client(queue_name)
            # Round trip so connectivity and auth failures surface at open().
            sdk_client.get_queue_properties()
        except ResourceNotFoundError as e:
            raise QueueResolutionError(queue_name, f"Queue '{queue_name}' does not exist") from e
        except AzureError as e:
            raise QueueResolutionError(queue_name, f"Failed to resolve queue '{queue_name}': {e}") from e
        except ValueError as e:
            # Raised by the SDK for malformed connection strings and URLs.
            raise QueueResolutionError(queue_name, f"Invalid connection settings for queue '{queue_name}': {e}") from e

        logger.debug("Queue resolved", queue_name=queue_name, auth_method=self._auth.auth_method)
        return AzureQueueClient(sdk_client)

    def close(self) -> None:
        with self._lock:
            if self._service_client is not None:
                self._service_client.close()
                self._service_client = None
