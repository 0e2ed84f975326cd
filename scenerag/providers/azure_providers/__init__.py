from .llm_provider import AzureLLMProvider
from .embedding_provider import AzureEmbeddingProvider
from .storage_provider import AzureStorageProvider

__all__ = [
    'AzureLLMProvider',
    'AzureEmbeddingProvider',
    'AzureStorageProvider',
]
