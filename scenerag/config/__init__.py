from .settings import (
    SceneRAGConfig,
    LLMConfig,
    EmbeddingConfig,
    StoreConfig,
    StorageConfig,
    RetrievalConfig,
    ChatConfig,
    LoggingConfig,
)

__all__ = [
    "SceneRAGConfig",
    "LLMConfig",
    "EmbeddingConfig",
    "StoreConfig",
    "StorageConfig",
    "RetrievalConfig",
    "ChatConfig",
    "LoggingConfig",
]
