"""
Azure token credentials shared by the Azure OpenAI clients and Blob Storage.

With ``AZURE_CLIENT_ID`` set (a user-assigned managed identity) that identity
is tried first; otherwise the Azure CLI login, then DefaultAzureCredential.
"""

import os
from typing import Callable, Optional

from azure.identity import (
    AzureCliCredential,
    ChainedTokenCredential,
    DefaultAzureCredential,
    ManagedIdentityCredential,
    get_bearer_token_provider,
)
from azure.identity.aio import (
    AzureCliCredential as AsyncAzureCliCredential,
    ChainedTokenCredential as AsyncChainedTokenCredential,
    DefaultAzureCredential as AsyncDefaultAzureCredential,
    ManagedIdentityCredential as AsyncManagedIdentityCredential,
)

COGNITIVE_SERVICES_SCOPE = "https://cognitiveservices.azure.com/.default"


class AzureCredentials:
    """Builds sync and async credential chains in the same order."""

    @staticmethod
    def _client_id(client_id: Optional[str]) -> Optional[str]:
        return client_id or os.getenv("AZURE_CLIENT_ID")

    @staticmethod
    def get_credentials(client_id: Optional[str] = None):
        chain = [AzureCliCredential(), DefaultAzureCredential()]
        identity = AzureCredentials._client_id(client_id)
        if identity:
            chain.insert(0, ManagedIdentityCredential(client_id=identity))
        return ChainedTokenCredential(*chain)

    @staticmethod
    def get_async_credentials(client_id: Optional[str] = None):
        """Async variant of :meth:`get_credentials`, for the aio storage client."""
        chain = [AsyncAzureCliCredential(), AsyncDefaultAzureCredential()]
        identity = AzureCredentials._client_id(client_id)
        if identity:
            chain.insert(0, AsyncManagedIdentityCredential(client_id=identity))
        return AsyncChainedTokenCredential(*chain)

    @staticmethod
    def openai_token_provider(client_id: Optional[str] = None) -> Callable[[], str]:
        """Bearer token callable for ``AsyncAzureOpenAI(azure_ad_token_provider=...)``."""
        # get_bearer_token_provider needs a sync credential
        return get_bearer_token_provider(
            AzureCredentials.get_credentials(client_id), COGNITIVE_SERVICES_SCOPE
        )
