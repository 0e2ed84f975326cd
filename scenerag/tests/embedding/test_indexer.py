import asyncio

import pytest

from scenerag.embedding.scene_text import compose_scene_text
from scenerag.exceptions import DataIntegrityError, VideoNotFoundError
from scenerag.models import Collections, EmbeddingRecord
from ..helpers import make_scene, seed_video


def test_compose_scene_text_includes_analysis():
    scene = make_scene(
        description="A red car speeds down a road",
        transcript="Feel the power",
        mood="energetic",
        visual_elements=["car", "road"],
        product="Roadster",
    )
    text = compose_scene_text(scene)
    assert text.startswith("Scene 0 (0.0s - 5.0s):")
    assert "Transcript: Feel the power" in text
    assert "Visual elements: car, road" in text
    assert "Mood: energetic" in text
    assert "Product: Roadster" in text
    assert "Call to action" not in text


def test_save_and_index_is_idempotent(services, store):
    scene = make_scene(description="A red car", visual_elements=["car"])

    async def run():
        await seed_video(store)
        first = await services.indexer.save_and_index(scene)
        second = await services.indexer.save_and_index(scene)
        return first, second

    first, second = asyncio.run(run())
    assert first == second == EmbeddingRecord.make_id(scene.id)
    assert asyncio.run(services.vector_index.count()) == 1
    stored = asyncio.run(store.get(Collections.SCENES, scene.id))
    assert stored["embeddingId"] == first


def test_index_scene_requires_video_in_same_campaign(services, store):
    scene = make_scene(campaign_id="camp1")

    with pytest.raises(VideoNotFoundError):
        asyncio.run(services.indexer.index_scene(scene))

    asyncio.run(seed_video(store, campaign_id="other"))
    with pytest.raises(DataIntegrityError):
        asyncio.run(services.indexer.index_scene(scene))


def test_reindex_all_counts_failures_without_stopping(services, store):
    async def run():
        await seed_video(store, "vid1")
        for number in range(3):
            scene = make_scene("vid1", number, description=f"shot {number}")
            await store.set(Collections.SCENES, scene.id, scene.to_document())
        orphan = make_scene("ghost", 0)
        await store.set(Collections.SCENES, orphan.id, orphan.to_document())
        return await services.indexer.reindex_all("camp1")

    assert asyncio.run(run()) == {"processed": 3, "failed": 1, "total": 4}
    assert asyncio.run(services.vector_index.count("camp1")) == 3
