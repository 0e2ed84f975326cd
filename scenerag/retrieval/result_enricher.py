import asyncio
from typing import Dict, List, Optional, Sequence
from loguru import logger

from scenerag.exceptions import ProviderException
from scenerag.models import Collections, Scene, ScoredScene, SearchResult, Video, VideoSummary
from scenerag.providers.base import DocumentStore, StorageProvider
from scenerag.utils.storage_paths import scene_clip_path, scene_thumbnail_path


def _query_words(query: str) -> List[str]:
    return query.lower().split()


def lexical_score(scene: Scene, query: str) -> float:
    """
    Keyword relevance used when a scene has no vector similarity.

    ``0.5 * confidence``, +0.2 if the whole query occurs in the description,
    +0.15 if it occurs in the transcript, +0.1 for every query word found in
    some visual element; clamped to ``[0, 1]``.
    """
    query_lower = query.strip().lower()
    score = 0.5 * scene.analysis.confidence
    if query_lower:
        if query_lower in scene.description.lower():
            score += 0.2
        if query_lower in scene.transcript.lower():
            score += 0.15
    elements = [element.lower() for element in scene.analysis.visual_elements]
    for word in _query_words(query):
        if any(word in element for element in elements):
            score += 0.1
    return max(0.0, min(score, 1.0))


def extract_highlights(scene: Scene, query: str) -> List[str]:
    """Visual elements, mood and product that contain a query word, without duplicates."""
    words = _query_words(query)
    if not words:
        return []

    def hit(value: str) -> bool:
        value = value.lower()
        return any(word in value for word in words)

    candidates = [element for element in scene.analysis.visual_elements if hit(element)]
    if hit(scene.analysis.mood):
        candidates.append(scene.analysis.mood)
    if scene.analysis.product and hit(scene.analysis.product):
        candidates.append(scene.analysis.product)
    return list(dict.fromkeys(candidates))


class ResultEnricher:
    """Turns ranked scenes into search results with video info, signed URLs and highlights."""

    def __init__(self, store: DocumentStore, storage: StorageProvider, signed_url_ttl: int = 168 * 3600):
        self.store = store
        self.storage = storage
        self.signed_url_ttl = signed_url_ttl

    async def _load_videos(self, video_ids: Sequence[str]) -> Dict[str, Optional[Video]]:
        documents = await asyncio.gather(
            *(self.store.get(Collections.VIDEOS, video_id) for video_id in video_ids)
        )
        return {
            video_id: Video.from_document(doc) if doc is not None else None
            for video_id, doc in zip(video_ids, documents)
        }

    async def _sign_urls(self, scene: Scene) -> Scene:
        clip_url, thumbnail_url = await asyncio.gather(
            self.storage.get_signed_url(scene_clip_path(scene.video_id, scene.scene_number), self.signed_url_ttl),
            self.storage.get_signed_url(scene_thumbnail_path(scene.video_id, scene.scene_number), self.signed_url_ttl),
        )
        return scene.model_copy(update={"clip_url": clip_url, "thumbnail_url": thumbnail_url})

    async def _enrich_one(self, scored: ScoredScene, video: Optional[Video], query: str) -> Optional[SearchResult]:
        scene = scored.scene
        if video is None:
            logger.warning(f"Video {scene.video_id} not found for scene {scene.id}; skipping orphaned scene")
            return None
        try:
            scene = await self._sign_urls(scene)
        except ProviderException as e:
            logger.warning(f"Could not sign media URLs for scene {scene.id}: {e}")
            return None

        score = scored.vector_similarity if scored.vector_similarity is not None else lexical_score(scene, query)
        return SearchResult(
            scene=scene,
            video=VideoSummary(id=video.id, file_name=video.file_name, duration=video.duration),
            score=score,
            highlights=extract_highlights(scene, query),
        )

    async def enrich(self, scenes: Sequence[ScoredScene], query: str) -> List[SearchResult]:
        if not scenes:
            return []
        video_ids = list(dict.fromkeys(scored.scene.video_id for scored in scenes))
        videos = await self._load_videos(video_ids)

        enriched = await asyncio.gather(
            *(self._enrich_one(scored, videos[scored.scene.video_id], query) for scored in scenes)
        )
        results = [result for result in enriched if result is not None]
        results.sort(key=lambda result: result.score, reverse=True)
        return results
