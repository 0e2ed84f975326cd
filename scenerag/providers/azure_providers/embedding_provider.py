from scenerag.providers.base import EmbeddingProvider
from typing import Dict, Any, List
from loguru import logger
from scenerag.utils.error_handler import ProviderException, ConfigurationException
from scenerag.utils.error_handler import convert_exceptions
from .client import build_azure_openai_client


class AzureEmbeddingProvider(EmbeddingProvider):
    """Azure OpenAI embedding provider implementation."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.client = build_azure_openai_client(config, default_max_retries=0)

    def _deployment_name(self) -> str:
        deployment_name = self.config.get("deployment_name")
        if not deployment_name:
            raise ConfigurationException(
                "Azure OpenAI embedding deployment name is required. "
                "Set EMBEDDING_DEPLOYMENT_NAME environment variable."
            )
        return deployment_name

    @convert_exceptions({Exception: ProviderException})
    async def embedding(self, text: str, **kwargs) -> List[float]:
        """Generate embedding using Azure OpenAI."""
        kwargs.pop("task_type", None)
        response = await self.client.embeddings.create(
            model=self._deployment_name(),
            input=text,
            **kwargs
        )
        return response.data[0].embedding

    @convert_exceptions({Exception: ProviderException})
    async def batch_embedding(self, texts: List[str], **kwargs) -> List[List[float]]:
        """Generate embeddings for multiple texts using Azure OpenAI."""
        kwargs.pop("task_type", None)
        response = await self.client.embeddings.create(
            model=self._deployment_name(),
            input=texts,
            **kwargs
        )
        return [item.embedding for item in response.data]

    async def close(self):
        """Close the embedding client and cleanup resources."""
        if self.client:
            logger.info("Closing Azure OpenAI embedding client")
            await self.client.close()
