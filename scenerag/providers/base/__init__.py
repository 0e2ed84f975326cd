from .llm_provider import LLMProvider
from .embedding_provider import EmbeddingProvider
from .storage_provider import StorageProvider
from .document_store import DocumentStore

__all__ = [
    'LLMProvider',
    'EmbeddingProvider',
    'StorageProvider',
    'DocumentStore',
]
