from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Union
import aiofiles
from azure.storage.blob import BlobSasPermissions, generate_blob_sas
from azure.storage.blob.aio import BlobServiceClient
from loguru import logger
from scenerag.providers.base import StorageProvider
from scenerag.providers.credentials import AzureCredentials
from scenerag.utils.error_handler import handle_exceptions, convert_exceptions
from scenerag.utils.error_handler import ProviderException, ConfigurationException


class AzureStorageProvider(StorageProvider):
    """Azure Blob Storage provider implementation.

    All objects live in one container; ``path`` is the blob name
    (``scenes/{videoId}/scene_001.mp4``).
    """

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize Azure Storage Provider.

        Args:
            config: Configuration dictionary with:
                - account_url: Azure Storage account URL
                - container_name: Container holding clips, thumbnails and audio
                - use_managed_identity: Whether to use managed identity (default: True)
        """
        self.config = config
        self.container_name = config.get("container_name", "scenerag")
        self.credential = None
        self.service_client = None

    def _initialize(self):
        """Initialize credential and service client."""
        try:
            if not self.config.get("use_managed_identity", True):
                raise ConfigurationException(
                    "Azure Blob Storage requires managed identity; user delegation SAS is used for signed URLs"
                )
            account_url = self.config.get("account_url")
            if not account_url:
                raise ConfigurationException("Azure Storage account_url is required")

            self.credential = AzureCredentials.get_async_credentials(self.config.get("managed_identity_client_id"))
            self.service_client = BlobServiceClient(
                account_url=account_url,
                credential=self.credential,
            )
            logger.info("Successfully initialized Azure Blob Storage client")
        except ConfigurationException:
            raise
        except Exception as e:
            logger.exception(f"Failed to initialize Azure Blob Storage client: {e}")
            raise ProviderException(f"Failed to initialize Azure Blob Storage client: {e}")

    def _ensure_initialized(self):
        """Ensure the client is initialized before operations."""
        if self.service_client is None:
            self._initialize()

    def _container(self):
        self._ensure_initialized()
        return self.service_client.get_container_client(self.container_name)

    @handle_exceptions(retries=3, exceptions=(ProviderException,))
    @convert_exceptions({Exception: ProviderException})
    async def upload(self, data: Union[bytes, str], path: str, **kwargs) -> str:
        """Upload bytes, or the contents of a local file path, to ``path``."""
        if isinstance(data, str):
            async with aiofiles.open(data, "rb") as f:
                data = await f.read()
        blob = self._container().get_blob_client(path)
        try:
            await blob.upload_blob(data, overwrite=True, **kwargs)
            logger.debug(f"Uploaded blob {self.container_name}/{path}")
            return blob.url
        finally:
            await blob.close()

    @convert_exceptions({Exception: ProviderException})
    async def delete(self, path: str) -> None:
        """Delete one blob; missing blobs are ignored."""
        await self._container().delete_blobs(path, raise_on_any_failure=False)

    @convert_exceptions({Exception: ProviderException})
    async def delete_by_prefix(self, prefix: str) -> int:
        """Delete every blob whose name starts with ``prefix``."""
        container = self._container()
        names = [blob.name async for blob in container.list_blobs(name_starts_with=prefix)]
        if not names:
            return 0
        # Blob batch requests accept at most 256 sub-requests
        for start in range(0, len(names), 256):
            await container.delete_blobs(*names[start:start + 256], raise_on_any_failure=False)
        logger.info(f"Deleted {len(names)} blobs under {self.container_name}/{prefix}")
        return len(names)

    @convert_exceptions({Exception: ProviderException})
    async def get_signed_url(self, path: str, ttl_seconds: int) -> str:
        """Generate a read-only user delegation SAS URL for ``path``."""
        self._ensure_initialized()
        now = datetime.now(timezone.utc)
        expiry = now + timedelta(seconds=ttl_seconds)
        delegation_key = await self.service_client.get_user_delegation_key(
            key_start_time=now - timedelta(minutes=5),
            key_expiry_time=expiry,
        )
        sas = generate_blob_sas(
            account_name=self.service_client.account_name,
            container_name=self.container_name,
            blob_name=path,
            user_delegation_key=delegation_key,
            permission=BlobSasPermissions(read=True),
            expiry=expiry,
        )
        return f"{self.service_client.url.rstrip('/')}/{self.container_name}/{path}?{sas}"

    async def close(self):
        """Close the underlying service client and cleanup."""
        if self.service_client:
            logger.info("Closing Azure Blob Storage client")
            await self.service_client.close()
        if self.credential:
            await self.credential.close()
