"""Conveyor: batched, concurrent record writer for Azure Storage Queues.

    from conveyor import QueueWriter, QueueWriterConfig
    from conveyor.azure import AzureAuthConfig, AzureQueueConnection

    connection = AzureQueueConnection(AzureAuthConfig(connection_string=conn_str))
    writer = QueueWriter(QueueWriterConfig(queue_name="orders"), connection)
    writer.open("run-1")
    writer.write({"messageContent": "hello"})
    result = writer.close()
"""

from conveyor.config import QueueWriterConfig
from conveyor.contracts import MESSAGE_CONTENT_FIELD, DispatchReport, PendingMessage, WriteResult
from conveyor.errors import (
    ConnectionValidationError,
    ConveyorError,
    MessageContentError,
    QueueResolutionError,
    QueueSendError,
    WriterConfigError,
    WriterStateError,
)
from conveyor.writer import QueueWriter, WriterState

__version__ = "0.1.0"

__all__ = [
    "MESSAGE_CONTENT_FIELD",
    "ConnectionValidationError",
    "ConveyorError",
    "DispatchReport",
    "MessageContentError",
    "PendingMessage",
    "QueueResolutionError",
    "QueueSendError",
    "QueueWriter",
    "QueueWriterConfig",
    "WriteResult",
    "WriterConfigError",
    "WriterState",
]
