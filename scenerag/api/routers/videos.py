from typing import Optional
from fastapi import APIRouter, Depends, Query

from scenerag.api.dependencies import get_services
from scenerag.container import Services

router = APIRouter(tags=["videos"])


@router.delete("/videos/{video_id}", summary="Delete a video with its scenes, embeddings and media")
async def delete_video(video_id: str, services: Services = Depends(get_services)):
    removed = await services.videos.delete_video(video_id)
    return {"videoId": video_id, "deleted": removed}


@router.post("/embeddings/reindex", summary="Regenerate scene embeddings")
async def reindex(
    campaign_id: Optional[str] = Query(default=None, alias="campaignId"),
    services: Services = Depends(get_services),
):
    return await services.indexer.reindex_all(campaign_id)
