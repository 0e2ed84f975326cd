from .storage_provider import LocalStorageProvider
from .memory_document_store import MemoryDocumentStore
from .json_document_store import JsonFileDocumentStore
from .fallback_document_store import FallbackDocumentStore
from .http_embedding_provider import HttpEmbeddingProvider
from .local_embedding_provider import LocalEmbeddingProvider

__all__ = [
    'LocalStorageProvider',
    'MemoryDocumentStore',
    'JsonFileDocumentStore',
    'FallbackDocumentStore',
    'HttpEmbeddingProvider',
    'LocalEmbeddingProvider',
]
