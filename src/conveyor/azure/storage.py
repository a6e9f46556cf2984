# src/conveyor/azure/storage.py
"""Storage account checks used when configuring a pipeline.

validate_connection() reports problems as a ValidationResult so a
configuration UI can display them; list_container_names() raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import structlog
from azure.core.exceptions import AzureError

from conveyor.azure.auth import AzureAuthConfig
from conveyor.errors import ConnectionValidationError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a connection check."""

    status: Literal["ok", "error"]
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @classmethod
    def success(cls) -> ValidationResult:
        return cls(status="ok")

    @classmethod
    def error(cls, message: str) -> ValidationResult:
        return cls(status="error", message=message)


class StorageAccountValidator:
    """Checks that a storage account can be reached with the given auth."""

    def __init__(self, auth: AzureAuthConfig) -> None:
        self._auth = auth

    def validate_connection(self) -> ValidationResult:
        """Build a blob service client and report whether it could be created."""
        try:
            with self._auth.create_blob_service_client():
                pass
        except (AzureError, ValueError) as e:
            logger.warning("Storage account validation failed", auth_method=self._auth.auth_method, error=str(e))
            return ValidationResult.error(str(e))
        return ValidationResult.success()

    def list_container_names(self) -> list[str]:
        """Names of the blob containers in the account.

        Raises:
            ConnectionValidationError: If the account cannot be listed.
        """
        try:
            client = self._auth.create_blob_service_client()
            with client:
                return [container.name for container in client.list_containers()]
        except (AzureError, ValueError) as e:
            raise ConnectionValidationError(f"Failed to list containers: {e}") from e
