"""Azure Storage adapters for conveyor.

Provides the queue connection used by QueueWriter and the storage account
validator. Supports connection string, shared key, SAS token, Managed
Identity and Service Principal authentication.
"""

from conveyor.azure.auth import AzureAuthConfig
from conveyor.azure.queue import AzureQueueClient, AzureQueueConnection
from conveyor.azure.storage import StorageAccountValidator, ValidationResult

__all__ = [
    "AzureAuthConfig",
    "AzureQueueClient",
    "AzureQueueConnection",
    "StorageAccountValidator",
    "ValidationResult",
]
