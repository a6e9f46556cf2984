# src/conveyor/azure/auth.py
"""Storage account connection settings for the Azure adapters.

Supports five methods (mutually exclusive):
1. connection_string - Full connection string
2. account_name + account_key - Shared key
3. account_name + sas_token - Shared Access Signature token
4. account_name + use_managed_identity - Azure Managed Identity
5. account_name + tenant_id + client_id + client_secret - Service Principal

Credentials are passed to the Azure SDK unchanged. Keep secrets in
environment variables, not in pipeline definitions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal, Self, cast

from pydantic import BaseModel, ValidationError, model_validator

from conveyor.errors import WriterConfigError

if TYPE_CHECKING:
    from azure.storage.blob import BlobServiceClient
    from azure.storage.queue import QueueServiceClient

_AUTH_METHODS_HINT = (
    "connection_string, "
    "account_name + account_key, "
    "account_name + sas_token, "
    "managed identity (account_name + use_managed_identity), or "
    "service principal (account_name + tenant_id + client_id + client_secret)"
)

# Every SDK call is a single wire attempt; callers count failures, they do not retry.
_CLIENT_OPTIONS: dict[str, Any] = {"retry_total": 0}


class AzureAuthConfig(BaseModel):
    """Azure Storage account connection configuration.

    Example configurations:

        # Connection string
        connection_string: "${AZURE_STORAGE_CONNECTION_STRING}"

        # Shared key
        account_name: "mystorageaccount"
        account_key: "${AZURE_STORAGE_ACCOUNT_KEY}"

        # Managed Identity
        account_name: "mystorageaccount"
        use_managed_identity: true
    """

    model_config = {"extra": "forbid"}

    connection_string: str | None = None

    account_name: str | None = None
    endpoint_suffix: str = "core.windows.net"
    protocol: Literal["https", "http"] = "https"

    account_key: str | None = None
    sas_token: str | None = None
    use_managed_identity: bool = False

    tenant_id: str | None = None
    client_id: str | None = None
    client_secret: str | None = None

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> Self:
        """Create config from dict, wrapping validation errors.

        Raises:
            WriterConfigError: If no, or more than one, auth method is configured.
        """
        try:
            return cls.model_validate(config)
        except ValidationError as e:
            raise WriterConfigError(f"Invalid configuration for {cls.__name__}: {e}") from e

    @model_validator(mode="after")
    def validate_auth_method(self) -> Self:
        """Ensure exactly one auth method is configured.

        Raises:
            ValueError: If zero or multiple auth methods are configured, or
                a method is only partially configured.
        """
        has_account = self._is_set(self.account_name)
        has_conn_string = self._is_set(self.connection_string)
        has_account_key = self._is_set(self.account_key)
        has_sas_token = self._is_set(self.sas_token)
        has_managed_identity = self.use_managed_identity
        sp_fields = {
            "tenant_id": self.tenant_id,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        sp_set = [name for name, value in sp_fields.items() if self._is_set(value)]
        has_service_principal = bool(sp_set)

        active_count = sum([has_conn_string, has_account_key, has_sas_token, has_managed_identity, has_service_principal])

        if active_count == 0:
            raise ValueError(f"No authentication method configured. Provide one of: {_AUTH_METHODS_HINT}")

        if active_count > 1:
            raise ValueError(f"Multiple authentication methods configured. Provide exactly one of: {_AUTH_METHODS_HINT}")

        if has_service_principal and len(sp_set) < len(sp_fields):
            missing = [name for name in sp_fields if name not in sp_set]
            raise ValueError(f"Service Principal auth requires all fields. Missing: {', '.join(missing)}")

        if not has_conn_string and not has_account:
            raise ValueError(f"{self.auth_method} auth requires account_name")

        return self

    @staticmethod
    def _is_set(value: str | None) -> bool:
        """Whitespace-only strings count as unset, matching the validator."""
        return value is not None and bool(value.strip())

    @property
    def auth_method(self) -> str:
        """Return the active authentication method name."""
        if self._is_set(self.connection_string):
            return "connection_string"
        elif self._is_set(self.account_key):
            return "account_key"
        elif self._is_set(self.sas_token):
            return "sas_token"
        elif self.use_managed_identity:
            return "managed_identity"
        else:
            return "service_principal"

    def account_url(self, service: Literal["blob", "queue"]) -> str:
        """Endpoint URL of the given storage service for this account.

        Not available for connection-string auth, where the SDK parses the
        endpoints out of the string.
        """
        if not self._is_set(self.account_name):
            raise ValueError("account_url requires account_name")
        return f"{self.protocol}://{self.account_name}.{service}.{self.endpoint_suffix}"

    def _credential(self) -> Any:
        """Credential object (or SAS string) for the non-connection-string methods."""
        method = self.auth_method
        if method == "account_key":
            return {"account_name": self.account_name, "account_key": self.account_key}
        if method == "sas_token":
            sas_token = cast(str, self.sas_token)
            return sas_token.lstrip("?")
        if method == "managed_identity":
            try:
                from azure.identity import DefaultAzureCredential
            except ImportError as e:
                raise ImportError("azure-identity is required for Managed Identity auth. Install with: pip install azure-identity") from e
            return DefaultAzureCredential()
        try:
            from azure.identity import ClientSecretCredential
        except ImportError as e:
            raise ImportError("azure-identity is required for Service Principal auth. Install with: pip install azure-identity") from e
        return ClientSecretCredential(
            tenant_id=cast(str, self.tenant_id),
            client_id=cast(str, self.client_id),
            client_secret=cast(str, self.client_secret),
        )

    def create_queue_service_client(self) -> QueueServiceClient:
        """Create QueueServiceClient using the configured auth method.

        Raises:
            ImportError: If azure-storage-queue or azure-identity is not installed.
        """
        try:
            from azure.storage.queue import QueueServiceClient
        except ImportError as e:
            raise ImportError("azure-storage-queue is required for queue writing. Install with: pip install azure-storage-queue") from e

        if self.auth_method == "connection_string":
            return QueueServiceClient.from_connection_string(cast(str, self.connection_string), **_CLIENT_OPTIONS)
        return QueueServiceClient(self.account_url("queue"), credential=self._credential(), **_CLIENT_OPTIONS)

    def create_blob_service_client(self) -> BlobServiceClient:
        """Create BlobServiceClient using the configured auth method.

        Raises:
            ImportError: If azure-storage-blob or azure-identity is not installed.
        """
        try:
            from azure.storage.blob import BlobServiceClient
        except ImportError as e:
            raise ImportError("azure-storage-blob is required for connection validation. Install with: pip install azure-storage-blob") from e

        if self.auth_method == "connection_string":
            return BlobServiceClient.from_connection_string(cast(str, self.connection_string), **_CLIENT_OPTIONS)
        return BlobServiceClient(self.account_url("blob"), credential=self._credential(), **_CLIENT_OPTIONS)
