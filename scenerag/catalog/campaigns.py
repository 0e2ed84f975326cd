import math
from collections import Counter
from typing import Dict, List, Optional
from pydantic import Field
from loguru import logger

from scenerag.exceptions import CampaignNotFoundError
from scenerag.models import Campaign, Collections, DocumentModel, Scene
from scenerag.providers.base import DocumentStore


class ElementCount(DocumentModel):
    element: str
    count: int


class ProductCount(DocumentModel):
    product: str
    count: int


class CampaignAnalytics(DocumentModel):
    campaign_id: str
    total_videos: int
    total_scenes: int
    total_duration: float
    average_scene_length: float
    top_visual_elements: List[ElementCount] = Field(default_factory=list)
    mood_distribution: Dict[str, int] = Field(default_factory=dict)
    most_common_products: List[ProductCount] = Field(default_factory=list)


def _round_tenth(value: float) -> float:
    # Half-up rounding to one decimal
    return math.floor(value * 10 + 0.5) / 10


class CampaignCatalog:
    """Read-only campaign, video and scene statistics."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def list_campaigns(self, limit: int = 50) -> List[Campaign]:
        documents = await self.store.query(
            Collections.CAMPAIGNS, order_by="updatedAt", descending=True, limit=limit
        )
        return [Campaign.from_document(doc) for doc in documents]

    async def count_campaigns(self) -> int:
        return await self.store.count(Collections.CAMPAIGNS)

    async def get_campaign(self, campaign_id: str) -> Campaign:
        document = await self.store.get(Collections.CAMPAIGNS, campaign_id)
        if document is None:
            raise CampaignNotFoundError(campaign_id)
        return Campaign.from_document(document)

    async def count_videos(self, campaign_id: Optional[str] = None) -> int:
        filters = {"campaignId": campaign_id} if campaign_id else None
        return await self.store.count(Collections.VIDEOS, filters)

    async def count_scenes(self, campaign_id: Optional[str] = None) -> int:
        filters = {"campaignId": campaign_id} if campaign_id else None
        return await self.store.count(Collections.SCENES, filters)

    async def get_campaign_analytics(self, campaign_id: str) -> CampaignAnalytics:
        """Scene counts, mood distribution, top visual elements and products for one campaign."""
        campaign = await self.get_campaign(campaign_id)
        documents = await self.store.query(Collections.SCENES, {"campaignId": campaign_id})
        scenes = [Scene.from_document(doc) for doc in documents]

        elements: Counter = Counter()
        moods: Counter = Counter()
        products: Counter = Counter()
        for scene in scenes:
            elements.update(scene.analysis.visual_elements)
            moods[scene.analysis.mood or "unknown"] += 1
            if scene.analysis.product:
                products[scene.analysis.product] += 1

        average = sum(scene.duration for scene in scenes) / len(scenes) if scenes else 0.0
        analytics = CampaignAnalytics(
            campaign_id=campaign_id,
            total_videos=campaign.video_count,
            total_scenes=len(scenes),
            total_duration=campaign.total_duration,
            average_scene_length=_round_tenth(average),
            top_visual_elements=[ElementCount(element=e, count=c) for e, c in elements.most_common(10)],
            mood_distribution=dict(moods),
            most_common_products=[ProductCount(product=p, count=c) for p, c in products.most_common(5)],
        )
        logger.debug(f"Computed analytics for campaign {campaign_id}: {len(scenes)} scenes")
        return analytics
