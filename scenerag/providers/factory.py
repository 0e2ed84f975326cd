from typing import Dict, Optional, Type
from loguru import logger

from .base import (
    LLMProvider,
    EmbeddingProvider,
    StorageProvider,
    DocumentStore,
)
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
from ..utils.error_handler import ConfigurationException
from ..config.settings import SceneRAGConfig


class ProviderFactory:
    """Factory class for creating provider instances."""

    _llm_providers: Dict[str, Type[LLMProvider]] = {
        'azure': AzureLLMProvider,
        'openai': OpenAILLMProvider,
    }

    _embedding_providers: Dict[str, Type[EmbeddingProvider]] = {
        'azure': AzureEmbeddingProvider,
        'openai': OpenAIEmbeddingProvider,
        'http': HttpEmbeddingProvider,
        'local': LocalEmbeddingProvider,
    }

    _storage_providers: Dict[str, Type[StorageProvider]] = {
        'azure': AzureStorageProvider,
        'local': LocalStorageProvider,
    }

    _document_stores: Dict[str, Type[DocumentStore]] = {
        'memory': MemoryDocumentStore,
        'json': JsonFileDocumentStore,
    }

    @staticmethod
    def _lookup(registry: Dict[str, type], kind: str, provider_name: str) -> type:
        if provider_name not in registry:
            raise ConfigurationException(
                f"Unknown {kind} provider: {provider_name}. "
                f"Supported providers: {list(registry.keys())}"
            )
        return registry[provider_name]

    @classmethod
    def create_llm_provider(
        cls, provider_name: str = None, config: Optional[SceneRAGConfig] = None
    ) -> LLMProvider:
        """
        Create LLM provider instance.

        Args:
            provider_name: Name of the provider (optional, defaults to config)
            config: Application config (optional, read from the environment)

        Raises:
            ConfigurationException: If provider is not supported
        """
        config = config or SceneRAGConfig()
        provider_name = provider_name or config.llm.provider
        provider_class = cls._lookup(cls._llm_providers, "LLM", provider_name)
        logger.info(f"Creating LLM provider: {provider_name}")
        return provider_class(config.llm.model_dump())

    @classmethod
    def create_embedding_provider(
        cls, provider_name: str = None, config: Optional[SceneRAGConfig] = None
    ) -> EmbeddingProvider:
        """Create the raw embedding backend (without retry or fallback)."""
        config = config or SceneRAGConfig()
        provider_name = provider_name or config.embedding.provider
        provider_class = cls._lookup(cls._embedding_providers, "embedding", provider_name)
        logger.info(f"Creating embedding provider: {provider_name}")
        return provider_class(config.embedding.model_dump())

    @classmethod
    def create_storage_provider(
        cls, provider_name: str = None, config: Optional[SceneRAGConfig] = None
    ) -> StorageProvider:
        """Create storage provider instance."""
        config = config or SceneRAGConfig()
        provider_name = provider_name or config.storage.provider
        provider_class = cls._lookup(cls._storage_providers, "storage", provider_name)
        logger.info(f"Creating storage provider: {provider_name}")
        return provider_class(config.storage.model_dump())

    @classmethod
    def create_document_store(
        cls, provider_name: str = None, config: Optional[SceneRAGConfig] = None
    ) -> DocumentStore:
        """Create the document store, wrapped with an in-memory fallback when enabled."""
        config = config or SceneRAGConfig()
        provider_name = provider_name or config.store.provider
        store_class = cls._lookup(cls._document_stores, "document store", provider_name)
        logger.info(f"Creating document store: {provider_name}")
        store = store_class(config.store.model_dump())
        if config.store.fallback_to_memory and not isinstance(store, MemoryDocumentStore):
            return FallbackDocumentStore(store)
        return store

    @classmethod
    def get_supported_providers(cls) -> Dict[str, list]:
        """Get list of supported providers by type."""
        return {
            "llm": list(cls._llm_providers.keys()),
            "embedding": list(cls._embedding_providers.keys()),
            "storage": list(cls._storage_providers.keys()),
            "store": list(cls._document_stores.keys()),
        }

    @classmethod
    def register_embedding_provider(cls, name: str, provider_class: Type[EmbeddingProvider]):
        """Register a new embedding provider."""
        cls._embedding_providers[name] = provider_class
        logger.info(f"Registered embedding provider: {name}")

    @classmethod
    def register_document_store(cls, name: str, store_class: Type[DocumentStore]):
        """Register a new document store."""
        cls._document_stores[name] = store_class
        logger.info(f"Registered document store: {name}")
