from typing import Dict, List, Optional
from loguru import logger

from scenerag.exceptions import VideoNotFoundError
from scenerag.models import Collections, EmbeddingRecord, Video
from scenerag.providers.base import DocumentStore, StorageProvider
from scenerag.retrieval.vector_index import VectorIndex
from scenerag.utils.storage_paths import video_prefixes


class VideoCatalog:
    """Video lookups and the delete cascade (embeddings, scenes, media, video)."""

    def __init__(self, store: DocumentStore, storage: StorageProvider, vector_index: VectorIndex):
        self.store = store
        self.storage = storage
        self.vector_index = vector_index

    async def get_video(self, video_id: str) -> Video:
        document = await self.store.get(Collections.VIDEOS, video_id)
        if document is None:
            raise VideoNotFoundError(video_id)
        return Video.from_document(document)

    async def list_videos(self, campaign_id: Optional[str] = None) -> List[Video]:
        filters = {"campaignId": campaign_id} if campaign_id else None
        documents = await self.store.query(Collections.VIDEOS, filters, order_by="uploadedAt", descending=True)
        return [Video.from_document(doc) for doc in documents]

    async def delete_video(self, video_id: str) -> Dict[str, int]:
        """
        Delete a video and everything derived from it.

        Embeddings go first so a concurrent search can no longer return the
        scenes, then the scene documents, the stored media and finally the
        video document.
        """
        await self.get_video(video_id)
        scenes = await self.store.query(Collections.SCENES, {"videoId": video_id})
        scene_ids = [scene["id"] for scene in scenes]

        embedding_ids = []
        for scene in scenes:
            embedding_ids.append(scene.get("embeddingId") or EmbeddingRecord.make_id(scene["id"]))
        embeddings_removed = await self.vector_index.delete_many(embedding_ids)
        scenes_removed = await self.store.batch_delete(Collections.SCENES, scene_ids) if scene_ids else 0

        files_removed = 0
        for prefix in video_prefixes(video_id):
            files_removed += await self.storage.delete_by_prefix(prefix)

        await self.store.delete(Collections.VIDEOS, video_id)
        logger.info(
            f"Deleted video {video_id}: {scenes_removed} scenes, "
            f"{embeddings_removed} embeddings, {files_removed} files"
        )
        return {"scenes": scenes_removed, "embeddings": embeddings_removed, "files": files_removed}
