import aiohttp
from typing import Any, Dict, List
from loguru import logger
from scenerag.providers.base import EmbeddingProvider
from scenerag.utils.error_handler import convert_exceptions
from scenerag.utils.error_handler import ProviderException, ConfigurationException


class HttpEmbeddingProvider(EmbeddingProvider):
    """Embedding provider for Vertex-style ``:predict`` REST endpoints.

    Sends ``{"instances": [{"content", "task_type"}], "parameters": {...}}``
    with a bearer token and reads ``predictions[i].embeddings.values``.
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.endpoint = config.get("endpoint")
        if not self.endpoint:
            raise ConfigurationException("HTTP embedding endpoint is required")
        self.headers = {"Content-Type": "application/json"}
        if config.get("api_key"):
            self.headers["Authorization"] = f"Bearer {config['api_key']}"
        self.timeout = aiohttp.ClientTimeout(total=config.get("timeout", 60))
        self.session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(headers=self.headers, timeout=self.timeout)
        return self.session

    async def _predict(self, texts: List[str], task_type: str) -> List[List[float]]:
        request_body = {
            "instances": [{"content": text, "task_type": task_type} for text in texts],
            "parameters": {"outputDimensionality": self.config.get("dimension", 768)},
        }
        session = self._get_session()
        async with session.post(self.endpoint, json=request_body) as response:
            if response.status == 429:
                raise ProviderException(
                    "HTTP 429 from embedding endpoint: resource exhausted",
                    error_code="RATE_LIMITED",
                    details={"status": 429},
                )
            if response.status >= 400:
                body = await response.text()
                raise ProviderException(
                    f"Embedding endpoint returned HTTP {response.status}: {body[:200]}",
                    details={"status": response.status},
                )
            payload = await response.json()

        try:
            return [prediction["embeddings"]["values"] for prediction in payload["predictions"]]
        except (KeyError, TypeError) as e:
            raise ProviderException(f"Unexpected embedding response shape: missing {e}")

    @convert_exceptions({Exception: ProviderException})
    async def embedding(self, text: str, **kwargs) -> List[float]:
        """Generate one embedding."""
        task_type = kwargs.get("task_type", "RETRIEVAL_DOCUMENT")
        vectors = await self._predict([text], task_type)
        return vectors[0]

    @convert_exceptions({Exception: ProviderException})
    async def batch_embedding(self, texts: List[str], **kwargs) -> List[List[float]]:
        """Generate embeddings for multiple texts in one request."""
        task_type = kwargs.get("task_type", "RETRIEVAL_DOCUMENT")
        return await self._predict(texts, task_type)

    async def close(self):
        if self.session and not self.session.closed:
            logger.info("Closing HTTP embedding session")
            await self.session.close()
