import asyncio
from typing import Awaitable, Callable, List, Optional
from loguru import logger
from scenerag.exceptions import DimensionMismatchError
from scenerag.providers.base import EmbeddingProvider
from scenerag.utils.error_handler import ErrorHandler
from .fallback import local_embedding
from .rate_limiter import AdaptiveRateLimiter

RETRIEVAL_QUERY = "RETRIEVAL_QUERY"
RETRIEVAL_DOCUMENT = "RETRIEVAL_DOCUMENT"


class ResilientEmbeddingProvider(EmbeddingProvider):
    """
    Wraps a backend embedding provider so callers always get a vector.

    Each attempt is paced by the shared rate limiter. Failures are retried
    with exponential backoff (``base_delay * 2**attempt``); once
    ``max_attempts`` are used up, or when there is no backend at all, the
    deterministic local embedding is returned instead.
    """

    def __init__(
        self,
        backend: Optional[EmbeddingProvider],
        dimension: int = 768,
        rate_limiter: Optional[AdaptiveRateLimiter] = None,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.backend = backend
        self.dimension = dimension
        self.rate_limiter = rate_limiter or AdaptiveRateLimiter.disabled()
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._sleep = sleep
        self.fallback_count = 0

    @classmethod
    def from_config(
        cls,
        backend: Optional[EmbeddingProvider],
        config,
        rate_limiter: Optional[AdaptiveRateLimiter] = None,
    ) -> "ResilientEmbeddingProvider":
        """Build from an ``EmbeddingConfig``."""
        return cls(
            backend=backend,
            dimension=config.dimension,
            rate_limiter=rate_limiter or AdaptiveRateLimiter.from_config(config),
            max_attempts=config.max_attempts,
            base_delay=config.base_delay,
        )

    def _fallback(self, text: str, reason: str) -> List[float]:
        self.fallback_count += 1
        logger.warning(f"Using local fallback embedding ({reason})")
        return local_embedding(text, self.dimension)

    async def embedding(self, text: str, task_type: str = RETRIEVAL_DOCUMENT, **kwargs) -> List[float]:
        """Embed ``text``; never raises for backend failure."""
        if self.backend is None:
            return self._fallback(text, "no embedding backend configured")

        last_error = None
        for attempt in range(self.max_attempts):
            await self.rate_limiter.acquire()
            try:
                vector = await self.backend.embedding(text, task_type=task_type, **kwargs)
            except Exception as e:
                last_error = e
                if ErrorHandler.is_rate_limit_error(e):
                    await self.rate_limiter.record_rate_limit()
                if attempt < self.max_attempts - 1:
                    delay = self.base_delay * (2 ** attempt)
                    logger.warning(
                        f"Embedding attempt {attempt + 1}/{self.max_attempts} failed: {e}. "
                        f"Retrying in {delay}s..."
                    )
                    await self._sleep(delay)
                continue

            await self.rate_limiter.record_success()
            if len(vector) != self.dimension:
                raise DimensionMismatchError(self.dimension, len(vector))
            return list(vector)

        return self._fallback(text, f"{self.max_attempts} attempts failed, last error: {last_error}")

    async def batch_embedding(self, texts: List[str], task_type: str = RETRIEVAL_DOCUMENT, **kwargs) -> List[List[float]]:
        """Embed texts one at a time so every request goes through the limiter."""
        return [await self.embedding(text, task_type=task_type, **kwargs) for text in texts]

    async def close(self):
        if self.backend is not None:
            await self.backend.close()
