"""Wires providers and services together from a SceneRAGConfig."""

from dataclasses import dataclass
from typing import Optional
from loguru import logger

from scenerag.catalog import CampaignCatalog, VideoCatalog
from scenerag.chat import ConversationOrchestrator, ConversationStore, ToolExecutor
from scenerag.config.settings import SceneRAGConfig
from scenerag.embedding import AdaptiveRateLimiter, ResilientEmbeddingProvider, SceneIndexer
from scenerag.exceptions import ConfigurationException
from scenerag.providers import ProviderFactory
from scenerag.providers.base import DocumentStore, EmbeddingProvider, LLMProvider, StorageProvider
from scenerag.retrieval import QueryRouter, ResultEnricher, SceneRetriever, SearchService, VectorIndex


@dataclass
class Services:
    config: SceneRAGConfig
    store: DocumentStore
    storage: StorageProvider
    embedder: ResilientEmbeddingProvider
    llm: Optional[LLMProvider]
    vector_index: VectorIndex
    retriever: SceneRetriever
    search: SearchService
    indexer: SceneIndexer
    campaigns: CampaignCatalog
    videos: VideoCatalog
    conversations: ConversationStore
    orchestrator: ConversationOrchestrator

    async def close(self):
        await self.embedder.close()
        if self.llm is not None:
            await self.llm.close()
        await self.storage.close()
        await self.store.close()


def _default_llm(config: SceneRAGConfig) -> Optional[LLMProvider]:
    try:
        return ProviderFactory.create_llm_provider(config=config)
    except ConfigurationException as e:
        logger.warning(f"No language model available, chat answers will use the fallback message: {e}")
        return None


def build_services(
    config: Optional[SceneRAGConfig] = None,
    store: Optional[DocumentStore] = None,
    storage: Optional[StorageProvider] = None,
    embedding_backend: Optional[EmbeddingProvider] = None,
    llm: Optional[LLMProvider] = None,
    rate_limiter: Optional[AdaptiveRateLimiter] = None,
) -> Services:
    """Build every service; explicitly passed collaborators replace the configured ones."""
    config = config or SceneRAGConfig()
    store = store or ProviderFactory.create_document_store(config=config)
    storage = storage or ProviderFactory.create_storage_provider(config=config)
    backend = embedding_backend or ProviderFactory.create_embedding_provider(config=config)
    llm = llm or _default_llm(config)

    embedder = ResilientEmbeddingProvider.from_config(backend, config.embedding, rate_limiter)
    vector_index = VectorIndex(store, dimension=config.embedding.dimension)
    retriever = SceneRetriever(
        store,
        vector_index,
        embedder,
        router=QueryRouter(),
        min_similarity=config.retrieval.min_similarity,
        default_limit=config.retrieval.default_limit,
        filtered_limit=config.retrieval.filtered_limit,
    )
    enricher = ResultEnricher(store, storage, signed_url_ttl=config.storage.signed_url_ttl_seconds)
    search = SearchService(store, retriever, enricher)
    campaigns = CampaignCatalog(store)
    conversations = ConversationStore(store)
    orchestrator = ConversationOrchestrator(
        conversations,
        search,
        llm,
        ToolExecutor(campaigns, search),
        config=config.chat,
    )

    logger.info(
        f"Services ready: store={type(store).__name__}, storage={type(storage).__name__}, "
        f"embedding={type(backend).__name__}, llm={type(llm).__name__ if llm else None}"
    )
    return Services(
        config=config,
        store=store,
        storage=storage,
        embedder=embedder,
        llm=llm,
        vector_index=vector_index,
        retriever=retriever,
        search=search,
        indexer=SceneIndexer(store, vector_index, embedder),
        campaigns=campaigns,
        videos=VideoCatalog(store, storage, vector_index),
        conversations=conversations,
        orchestrator=orchestrator,
    )
