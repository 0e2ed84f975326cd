"""Provider system for SceneRAG."""

from .base import (
    LLMProvider,
    EmbeddingProvider,
    StorageProvider,
    DocumentStore,
)
from .factory import ProviderFactory
from .azure_providers import (
    AzureLLMProvider,
    AzureEmbeddingProvider,
    AzureStorageProvider,
)
from .openai_providers import (
    OpenAILLMProvider,
    OpenAIEmbeddingProvider,
)
from .custom_providers import (
    LocalStorageProvider,
    MemoryDocumentStore,
    JsonFileDocumentStore,
    FallbackDocumentStore,
    HttpEmbeddingProvider,
    LocalEmbeddingProvider,
)

__all__ = [
    # Base classes
    'LLMProvider',
    'EmbeddingProvider',
    'StorageProvider',
    'DocumentStore',
    # Factory
    'ProviderFactory',
    # Azure providers
    'AzureLLMProvider',
    'AzureEmbeddingProvider',
    'AzureStorageProvider',
    # OpenAI providers
    'OpenAILLMProvider',
    'OpenAIEmbeddingProvider',
    # Local / custom providers
    'LocalStorageProvider',
    'MemoryDocumentStore',
    'JsonFileDocumentStore',
    'FallbackDocumentStore',
    'HttpEmbeddingProvider',
    'LocalEmbeddingProvider',
]
