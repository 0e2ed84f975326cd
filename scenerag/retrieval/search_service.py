from typing import List, Optional, Sequence
from loguru import logger

from scenerag.embedding.scene_text import compose_scene_text
from scenerag.exceptions import (
    RetrievalError,
    SceneNotFoundError,
    StoreError,
    ValidationException,
)
from scenerag.models import Collections, ScoredScene, SearchFilters, SearchOptions, SearchResult, Scene
from scenerag.providers.base import DocumentStore
from .result_enricher import ResultEnricher
from .scene_retriever import SceneRetriever, scene_from_document


class SearchService:
    """Outward search operations: route, retrieve, enrich."""

    def __init__(self, store: DocumentStore, retriever: SceneRetriever, enricher: ResultEnricher):
        self.store = store
        self.retriever = retriever
        self.enricher = enricher

    async def _enrich(self, scored: List[ScoredScene], query: str) -> List[SearchResult]:
        try:
            return await self.enricher.enrich(scored, query)
        except StoreError as e:
            raise RetrievalError(f"Could not load videos for results: {e.message}") from e

    async def query_scenes(
        self,
        query: str,
        campaign_id: Optional[str] = None,
        limit: Optional[int] = None,
        filters: Optional[SearchFilters] = None,
    ) -> List[SearchResult]:
        """Answer a free-text query with enriched, score-ranked results."""
        if not query or not query.strip():
            raise ValidationException("Query must not be empty")
        options = SearchOptions(campaign_id=campaign_id, limit=limit, filters=filters)
        scored = await self.retriever.retrieve(query, options)
        scoring_text = self.retriever.router.route(query).text
        results = await self._enrich(scored, scoring_text)
        logger.info(f"Query '{query}' returned {len(results)} results")
        return results

    async def get_scene(self, scene_id: str) -> Scene:
        try:
            document = await self.store.get(Collections.SCENES, scene_id)
        except StoreError as e:
            raise RetrievalError(f"Could not load scene {scene_id}: {e.message}") from e
        if document is None:
            raise SceneNotFoundError(scene_id)
        return scene_from_document(document)

    async def find_similar_scenes(
        self, scene_id: str, limit: int = 5, campaign_id: Optional[str] = None
    ) -> List[SearchResult]:
        """Scenes closest to ``scene_id``'s composed text, never including the scene itself."""
        source = await self.get_scene(scene_id)
        text = compose_scene_text(source)
        scored = await self.retriever.retrieve_by_text(
            text, campaign_id=campaign_id, limit=limit + 1, exclude_scene_ids=[scene_id]
        )
        results = await self._enrich(scored, text)
        return results[:limit]

    async def search_by_visual_elements(
        self,
        elements: Sequence[str],
        campaign_id: Optional[str] = None,
        match_all: bool = False,
        limit: int = 20,
    ) -> List[SearchResult]:
        """Scenes whose visual elements include any (or, with ``match_all``, every) of ``elements``."""
        wanted = [element.strip().lower() for element in elements if element and element.strip()]
        if not wanted:
            raise ValidationException("At least one visual element is required")

        filters = {"campaignId": campaign_id} if campaign_id else None
        try:
            documents = await self.store.query(Collections.SCENES, filters)
        except StoreError as e:
            raise RetrievalError(f"Visual element search failed: {e.message}") from e

        matched: List[ScoredScene] = []
        for document in documents:
            scene = scene_from_document(document)
            present = {element.lower() for element in scene.analysis.visual_elements}
            hits = [element in present for element in wanted]
            if all(hits) if match_all else any(hits):
                matched.append(ScoredScene(scene=scene, match_score=0.0))
            if len(matched) >= limit:
                break

        return await self._enrich(matched, " ".join(wanted))
