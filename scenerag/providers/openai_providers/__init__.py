from .llm_provider import OpenAILLMProvider
from .embedding_provider import OpenAIEmbeddingProvider

__all__ = [
    'OpenAILLMProvider',
    'OpenAIEmbeddingProvider',
]
