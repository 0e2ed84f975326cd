import asyncio

import pytest

from scenerag.chat.tools import TOOL_DECLARATIONS, TOOL_NAMES
from scenerag.exceptions import UnknownFunctionError
from ..helpers import make_scene, seed_campaign, seed_video


@pytest.fixture
def tools(services):
    return services.orchestrator.tools


@pytest.fixture
def seeded(services, store):
    async def run():
        await seed_campaign(store, "camp1", name="Spring Launch", video_count=1)
        await seed_campaign(store, "camp2", name="Winter")
        await seed_video(store, "vid1", campaign_id="camp1")
        await seed_video(store, "vid2", campaign_id="camp2")
        await services.indexer.save_and_index(
            make_scene("vid1", 0, description="car on a road", visual_elements=["car"], mood="energetic")
        )
        await services.indexer.save_and_index(
            make_scene("vid2", 0, campaign_id="camp2", description="car in the snow", visual_elements=["car"])
        )

    asyncio.run(run())


def test_declarations_cover_the_seven_functions(tools):
    assert TOOL_NAMES == {
        "count_campaigns", "list_campaigns", "get_campaign_details", "get_campaign_analytics",
        "search_scenes", "count_videos", "count_scenes",
    }
    assert tools.declarations is TOOL_DECLARATIONS
    search = next(t for t in TOOL_DECLARATIONS if t["function"]["name"] == "search_scenes")
    assert search["function"]["parameters"]["required"] == ["query"]


def test_counts_and_details(tools, seeded):
    run = asyncio.run
    assert run(tools.execute("count_campaigns")) == {"count": 2}
    assert run(tools.execute("count_videos", {"campaignId": "camp1"})) == {"count": 1}
    assert run(tools.execute("count_scenes")) == {"count": 2}
    details = run(tools.execute("get_campaign_details", {"campaignId": "camp1"}))
    assert details["name"] == "Spring Launch"
    analytics = run(tools.execute("get_campaign_analytics", {"campaignId": "camp1"}))
    assert analytics["totalScenes"] == 1
    listed = run(tools.execute("list_campaigns", {"limit": 1}))
    assert len(listed["campaigns"]) == 1
    assert set(listed["campaigns"][0]) == {"id", "name", "description", "videoCount", "totalDuration", "createdAt"}


def test_recoverable_errors_go_back_to_the_model(tools, seeded):
    run = asyncio.run
    assert run(tools.execute("get_campaign_details", {"campaignId": "missing"})) == {
        "error": "Campaign missing not found"
    }
    assert "error" in run(tools.execute("get_campaign_analytics", {}))
    assert "error" in run(tools.execute("list_campaigns", {"limit": "lots"}))
    assert "error" in run(tools.execute("search_scenes", {"query": ""}))


def test_search_scenes_is_pinned_to_conversation_campaign(tools, seeded):
    scoped = asyncio.run(tools.execute("search_scenes", {"query": "car", "campaignId": "camp2"}, "camp1"))
    assert [s["campaignId"] for s in scoped["scenes"]] == ["camp1"]

    unscoped = asyncio.run(tools.execute("search_scenes", {"query": "car", "campaignId": "camp2"}))
    assert [s["sceneId"] for s in unscoped["scenes"]] == ["vid2_scene_000"]
    assert unscoped["scenes"][0]["visualElements"] == ["car"]


def test_unknown_function_raises(tools):
    with pytest.raises(UnknownFunctionError):
        tools.check("drop_tables")
    with pytest.raises(UnknownFunctionError):
        asyncio.run(tools.execute("drop_tables", {}))
