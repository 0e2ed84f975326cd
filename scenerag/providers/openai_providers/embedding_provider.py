from scenerag.providers.base import EmbeddingProvider
from typing import Dict, Any, List
from loguru import logger
from scenerag.utils.error_handler import convert_exceptions, ProviderException, ConfigurationException
from openai import AsyncOpenAI


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """OpenAI embedding provider implementation.

    Retries are left to the resilient wrapper, so the client itself is
    created with ``max_retries=0`` unless configured otherwise.
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.client = self._initialize_client()

    def _initialize_client(self):
        """Initialize OpenAI client."""
        api_key = self.config.get("api_key")
        if not api_key:
            raise ConfigurationException("OpenAI API key is required for embeddings")
        try:
            return AsyncOpenAI(
                api_key=api_key,
                base_url=self.config.get("endpoint") or None,
                timeout=self.config.get("timeout", 60),
                max_retries=self.config.get("max_retries", 0),
            )
        except Exception as e:
            raise ProviderException(f"Failed to initialize OpenAI client: {e}")

    def _request_kwargs(self) -> Dict[str, Any]:
        request = {"model": self.config.get("model_name", "text-embedding-3-small")}
        dimension = self.config.get("dimension")
        if dimension and request["model"].startswith("text-embedding-3"):
            request["dimensions"] = dimension
        return request

    @convert_exceptions({Exception: ProviderException})
    async def embedding(self, text: str, **kwargs) -> List[float]:
        """Generate embedding using OpenAI."""
        # OpenAI has no task types; queries and documents share one space
        kwargs.pop("task_type", None)
        response = await self.client.embeddings.create(
            input=text,
            **self._request_kwargs(),
            **kwargs
        )
        return response.data[0].embedding

    @convert_exceptions({Exception: ProviderException})
    async def batch_embedding(self, texts: List[str], **kwargs) -> List[List[float]]:
        """Generate embeddings for multiple texts using OpenAI."""
        kwargs.pop("task_type", None)
        response = await self.client.embeddings.create(
            input=texts,
            **self._request_kwargs(),
            **kwargs
        )
        return [item.embedding for item in response.data]

    async def close(self):
        """Close the embedding client and cleanup resources."""
        if self.client:
            logger.info("Closing OpenAI embedding client")
            await self.client.close()
