from typing import Optional
from fastapi import APIRouter, Depends, Query

from scenerag.api.dependencies import get_services
from scenerag.api.schemas import SceneQueryRequest, VisualElementsRequest
from scenerag.container import Services

router = APIRouter(tags=["search"])


@router.post("/search/query", summary="Search scenes with a natural-language query")
async def query_scenes(body: SceneQueryRequest, services: Services = Depends(get_services)):
    results = await services.search.query_scenes(
        body.query, campaign_id=body.campaign_id, limit=body.limit, filters=body.filters
    )
    return {"results": [result.to_document() for result in results]}


@router.post("/search/visual-elements", summary="Find scenes containing visual elements")
async def search_visual_elements(body: VisualElementsRequest, services: Services = Depends(get_services)):
    results = await services.search.search_by_visual_elements(
        body.elements, campaign_id=body.campaign_id, match_all=body.match_all, limit=body.limit
    )
    return {"results": [result.to_document() for result in results]}


@router.get("/scenes/{scene_id}")
async def get_scene(scene_id: str, services: Services = Depends(get_services)):
    scene = await services.search.get_scene(scene_id)
    return scene.to_document()


@router.get("/scenes/{scene_id}/similar", summary="Scenes similar to a given scene")
async def similar_scenes(
    scene_id: str,
    limit: int = Query(default=5, ge=1, le=50),
    campaign_id: Optional[str] = Query(default=None, alias="campaignId"),
    services: Services = Depends(get_services),
):
    results = await services.search.find_similar_scenes(scene_id, limit=limit, campaign_id=campaign_id)
    return {"results": [result.to_document() for result in results]}
