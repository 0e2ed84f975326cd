import asyncio
from datetime import datetime, timezone

import pytest

from scenerag.catalog import CampaignCatalog
from scenerag.catalog.campaigns import _round_tenth
from scenerag.exceptions import CampaignNotFoundError
from scenerag.models import Collections
from ..helpers import make_scene, seed_campaign, seed_video


def test_round_tenth_rounds_half_up():
    assert _round_tenth(2.25) == 2.3
    assert _round_tenth(2.24) == 2.2
    assert _round_tenth(0.0) == 0.0


def test_campaign_analytics(store):
    catalog = CampaignCatalog(store)
    scenes = [
        make_scene("vid1", 0, mood="energetic", visual_elements=["car", "road"], product="Roadster", length=4.0),
        make_scene("vid1", 1, mood="energetic", visual_elements=["car"], product="Roadster", length=5.0),
        make_scene("vid1", 2, mood="calm", visual_elements=["beach"], product="Sunscreen", length=6.5),
        make_scene("vid9", 0, campaign_id="other", mood="sad", visual_elements=["rain"]),
    ]

    async def run():
        await seed_campaign(store, "camp1", video_count=1, total_duration=15.5)
        for scene in scenes:
            await store.set(Collections.SCENES, scene.id, scene.to_document())
        return await catalog.get_campaign_analytics("camp1")

    analytics = asyncio.run(run())
    assert analytics.total_scenes == 3
    assert analytics.total_videos == 1
    assert analytics.total_duration == 15.5
    assert analytics.average_scene_length == 5.2
    assert analytics.mood_distribution == {"energetic": 2, "calm": 1}
    assert [(e.element, e.count) for e in analytics.top_visual_elements][:1] == [("car", 2)]
    assert [(p.product, p.count) for p in analytics.most_common_products] == [("Roadster", 2), ("Sunscreen", 1)]
    assert analytics.to_document()["averageSceneLength"] == 5.2


def test_analytics_for_empty_campaign(store):
    catalog = CampaignCatalog(store)
    asyncio.run(seed_campaign(store, "empty"))
    analytics = asyncio.run(catalog.get_campaign_analytics("empty"))
    assert analytics.total_scenes == 0
    assert analytics.average_scene_length == 0.0
    assert analytics.top_visual_elements == []


def test_counts_and_listing(store):
    catalog = CampaignCatalog(store)

    async def run():
        await seed_campaign(store, "old", name="Old", updated_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
        await seed_campaign(store, "new", name="New", updated_at=datetime(2024, 6, 1, tzinfo=timezone.utc))
        await seed_video(store, "vid1", campaign_id="old")
        await seed_video(store, "vid2", campaign_id="new")
        await seed_video(store, "vid3", campaign_id="new")
        return (
            await catalog.count_campaigns(),
            await catalog.count_videos(),
            await catalog.count_videos("new"),
            await catalog.list_campaigns(limit=1),
        )

    campaigns, videos, new_videos, listed = asyncio.run(run())
    assert (campaigns, videos, new_videos) == (2, 3, 2)
    assert [c.id for c in listed] == ["new"]


def test_get_campaign_not_found(store):
    with pytest.raises(CampaignNotFoundError) as info:
        asyncio.run(CampaignCatalog(store).get_campaign("missing"))
    assert info.value.details == {"resource": "campaign", "id": "missing"}
