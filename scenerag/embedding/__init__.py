"""Embedding generation with adaptive pacing and a deterministic fallback."""

from .fallback import local_embedding, stable_hash
from .rate_limiter import AdaptiveRateLimiter
from .resilient_provider import ResilientEmbeddingProvider, RETRIEVAL_QUERY, RETRIEVAL_DOCUMENT
from .scene_text import compose_scene_text
from .indexer import SceneIndexer

__all__ = [
    "local_embedding",
    "stable_hash",
    "AdaptiveRateLimiter",
    "ResilientEmbeddingProvider",
    "RETRIEVAL_QUERY",
    "RETRIEVAL_DOCUMENT",
    "compose_scene_text",
    "SceneIndexer",
]
