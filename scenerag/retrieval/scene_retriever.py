import asyncio
from typing import Any, Dict, List, Optional, Sequence
from loguru import logger
from pydantic import ValidationError

from scenerag.embedding import RETRIEVAL_QUERY
from scenerag.exceptions import DataIntegrityError, RetrievalError, StoreError
from scenerag.models import Collections, Scene, ScoredScene, SearchFilters, SearchOptions
from scenerag.providers.base import DocumentStore, EmbeddingProvider
from .query_router import QueryRouter, RoutedQuery, SearchStrategy
from .result_enricher import lexical_score
from .vector_index import VectorIndex


def scene_from_document(document: Dict[str, Any]) -> Scene:
    try:
        return Scene.from_document(document)
    except ValidationError as e:
        raise DataIntegrityError(
            f"Stored scene {document.get('id')} is malformed: {e.error_count()} validation errors",
            details={"scene_id": document.get("id")},
        ) from e


def _effective_filters(routed: RoutedQuery, filters: Optional[SearchFilters]) -> SearchFilters:
    """Caller-supplied filters win over tokens found in the query text."""
    merged = filters.model_copy() if filters else SearchFilters()
    if merged.mood is None and routed.mood:
        merged.mood = routed.mood
    if merged.product is None and routed.product:
        merged.product = routed.product
    return merged


def apply_post_filters(scenes: List[ScoredScene], filters: SearchFilters) -> List[ScoredScene]:
    """Drop scenes failing the mood, product, confidence or visual element constraints."""
    kept = []
    required = {element.lower() for element in filters.visual_elements or []}
    for scored in scenes:
        analysis = scored.scene.analysis
        if filters.mood and analysis.mood.lower() != filters.mood.lower():
            continue
        if filters.product and (analysis.product or "").lower() != filters.product.lower():
            continue
        if filters.min_confidence is not None and analysis.confidence < filters.min_confidence:
            continue
        if required and not required & {element.lower() for element in analysis.visual_elements}:
            continue
        kept.append(scored)
    return kept


class SceneRetriever:
    """Runs the routed strategy and returns scenes ranked by match score.

    ``semantic`` and ``general`` queries are embedded and matched against the
    vector index; ``filtered`` queries become equality queries on the scene
    collection and are scored lexically. Document store failures surface as
    RetrievalError.
    """

    def __init__(
        self,
        store: DocumentStore,
        vector_index: VectorIndex,
        embedder: EmbeddingProvider,
        router: Optional[QueryRouter] = None,
        min_similarity: float = 0.0,
        default_limit: int = 20,
        filtered_limit: int = 10,
    ):
        self.store = store
        self.vector_index = vector_index
        self.embedder = embedder
        self.router = router or QueryRouter()
        self.min_similarity = min_similarity
        self.default_limit = default_limit
        self.filtered_limit = filtered_limit

    async def retrieve(
        self,
        query: str,
        options: Optional[SearchOptions] = None,
        strategy: Optional[SearchStrategy] = None,
        exclude_scene_ids: Optional[Sequence[str]] = None,
    ) -> List[ScoredScene]:
        options = options or SearchOptions()
        routed = self.router.route(query)
        strategy = strategy or routed.strategy
        filters = _effective_filters(routed, options.filters)
        campaign_id = options.campaign_id or routed.campaign_id

        try:
            if strategy.uses_vectors:
                scored = await self._vector_search(
                    routed.text or query, campaign_id, options.limit or self.default_limit, exclude_scene_ids
                )
            else:
                scored = await self._filtered_search(
                    routed, campaign_id, filters, options.limit or self.filtered_limit
                )
        except StoreError as e:
            raise RetrievalError(f"Scene retrieval failed: {e.message}", details={"query": query}) from e

        scored = apply_post_filters(scored, filters)
        if exclude_scene_ids:
            excluded = set(exclude_scene_ids)
            scored = [s for s in scored if s.scene.id not in excluded]
        scored.sort(key=lambda s: s.match_score, reverse=True)
        logger.info(f"Retrieved {len(scored)} scenes for query '{query}' using {strategy.value} strategy")
        return scored

    async def retrieve_by_text(
        self,
        text: str,
        campaign_id: Optional[str] = None,
        limit: Optional[int] = None,
        exclude_scene_ids: Optional[Sequence[str]] = None,
    ) -> List[ScoredScene]:
        """Vector search on ``text`` as given, without routing or query tokens."""
        try:
            scored = await self._vector_search(
                text, campaign_id, limit or self.default_limit, exclude_scene_ids
            )
        except StoreError as e:
            raise RetrievalError(f"Scene retrieval failed: {e.message}") from e

        if exclude_scene_ids:
            excluded = set(exclude_scene_ids)
            scored = [s for s in scored if s.scene.id not in excluded]
        scored.sort(key=lambda s: s.match_score, reverse=True)
        logger.info(f"Retrieved {len(scored)} scenes by raw text similarity")
        return scored

    async def _vector_search(
        self,
        text: str,
        campaign_id: Optional[str],
        limit: int,
        exclude_scene_ids: Optional[Sequence[str]],
    ) -> List[ScoredScene]:
        vector = await self.embedder.embedding(text, task_type=RETRIEVAL_QUERY)
        matches = await self.vector_index.search(
            vector,
            limit=limit,
            campaign_id=campaign_id,
            min_similarity=self.min_similarity,
            exclude_scene_ids=exclude_scene_ids,
        )
        documents = await asyncio.gather(
            *(self.store.get(Collections.SCENES, match.scene_id) for match in matches)
        )

        scored = []
        for match, document in zip(matches, documents):
            if document is None:
                logger.warning(f"Scene {match.scene_id} has an embedding but no scene document; skipping")
                continue
            scored.append(
                ScoredScene(
                    scene=scene_from_document(document),
                    match_score=match.similarity,
                    vector_similarity=match.similarity,
                )
            )
        return scored

    async def _filtered_search(
        self,
        routed: RoutedQuery,
        campaign_id: Optional[str],
        filters: SearchFilters,
        limit: int,
    ) -> List[ScoredScene]:
        if routed.scene_id:
            document = await self.store.get(Collections.SCENES, routed.scene_id)
            documents = [document] if document is not None else []
            if campaign_id:
                documents = [doc for doc in documents if doc.get("campaignId") == campaign_id]
        else:
            equality: Dict[str, Any] = {}
            if campaign_id:
                equality["campaignId"] = campaign_id
            if filters.mood:
                equality["analysis.mood"] = filters.mood
            if filters.product:
                equality["analysis.product"] = filters.product
            documents = await self.store.query(Collections.SCENES, equality, limit=limit)

        scenes = [scene_from_document(document) for document in documents]
        return [
            ScoredScene(scene=scene, match_score=lexical_score(scene, routed.text))
            for scene in scenes
        ]
