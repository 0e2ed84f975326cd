from typing import TYPE_CHECKING, Dict, List, Optional
from loguru import logger
from pydantic import ValidationError

from scenerag.exceptions import DataIntegrityError, SceneRAGException, VideoNotFoundError
from scenerag.models import Collections, Scene, VectorMetadata, Video
from scenerag.providers.base import DocumentStore, EmbeddingProvider
from .resilient_provider import RETRIEVAL_DOCUMENT
from .scene_text import compose_scene_text

if TYPE_CHECKING:
    from scenerag.retrieval.vector_index import VectorIndex


class SceneIndexer:
    """Embeds scenes and keeps the vector index and ``embeddingId`` back-references in sync."""

    def __init__(self, store: DocumentStore, vector_index: "VectorIndex", embedder: EmbeddingProvider):
        self.store = store
        self.vector_index = vector_index
        self.embedder = embedder

    async def _check_video(self, scene: Scene) -> None:
        document = await self.store.get(Collections.VIDEOS, scene.video_id)
        if document is None:
            raise VideoNotFoundError(scene.video_id)
        video = Video.from_document(document)
        if video.campaign_id != scene.campaign_id:
            raise DataIntegrityError(
                f"Scene {scene.id} belongs to campaign {scene.campaign_id} "
                f"but its video {video.id} belongs to {video.campaign_id}",
                details={"scene_id": scene.id, "video_id": video.id},
            )

    async def index_scene(self, scene: Scene) -> str:
        """Embed one scene, upsert its vector and record the embedding id on the scene."""
        await self._check_video(scene)
        text = compose_scene_text(scene)
        vector = await self.embedder.embedding(text, task_type=RETRIEVAL_DOCUMENT)
        embedding_id = await self.vector_index.upsert(scene.id, vector, VectorMetadata.from_scene(scene))
        if scene.embedding_id != embedding_id:
            await self.store.update(Collections.SCENES, scene.id, {"embeddingId": embedding_id})
            scene.embedding_id = embedding_id
        logger.info(f"Indexed scene {scene.id} as {embedding_id}")
        return embedding_id

    async def save_and_index(self, scene: Scene) -> str:
        """Persist a new or changed scene, then (re)generate its embedding."""
        await self.store.set(Collections.SCENES, scene.id, scene.to_document())
        return await self.index_scene(scene)

    async def index_video(self, video_id: str) -> List[str]:
        documents = await self.store.query(
            Collections.SCENES, {"videoId": video_id}, order_by="sceneNumber"
        )
        return [await self.index_scene(Scene.from_document(doc)) for doc in documents]

    async def reindex_all(self, campaign_id: Optional[str] = None) -> Dict[str, int]:
        """Regenerate every scene embedding; one failing scene does not stop the run."""
        filters = {"campaignId": campaign_id} if campaign_id else None
        documents = await self.store.query(Collections.SCENES, filters)
        processed = failed = 0
        for document in documents:
            try:
                await self.index_scene(Scene.from_document(document))
                processed += 1
            except (SceneRAGException, ValidationError) as e:
                failed += 1
                logger.error(f"Failed to reindex scene {document.get('id')}: {e}")
        logger.info(f"Reindex finished: {processed} processed, {failed} failed")
        return {"processed": processed, "failed": failed, "total": len(documents)}
