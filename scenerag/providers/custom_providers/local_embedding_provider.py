from typing import Any, Dict, List
from scenerag.providers.base import EmbeddingProvider
from scenerag.embedding.fallback import local_embedding


class LocalEmbeddingProvider(EmbeddingProvider):
    """Offline provider built on the deterministic hashed-token embedding.

    Useful for development and tests; similarity reflects shared words only.
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.dimension = config.get("dimension", 768)

    async def embedding(self, text: str, **kwargs) -> List[float]:
        return local_embedding(text, self.dimension)

    async def batch_embedding(self, texts: List[str], **kwargs) -> List[List[float]]:
        return [local_embedding(text, self.dimension) for text in texts]
