import asyncio

import pytest

from scenerag.exceptions import VideoNotFoundError
from scenerag.models import Collections
from ..helpers import make_scene, seed_video


def test_delete_video_cascades(services, store, storage):
    async def run():
        await seed_video(store, "vid1")
        await seed_video(store, "vid2")
        for number in range(2):
            await services.indexer.save_and_index(make_scene("vid1", number))
        await services.indexer.save_and_index(make_scene("vid2", 0))
        for path in (
            "audio/vid1/track.wav",
            "scenes/vid1/scene_000.mp4",
            "scenes/vid1/scene_001.mp4",
            "thumbnails/vid1/scene_000.jpg",
            "scenes/vid2/scene_000.mp4",
        ):
            await storage.upload(b"x", path)
        return await services.videos.delete_video("vid1")

    removed = asyncio.run(run())
    assert removed == {"scenes": 2, "embeddings": 2, "files": 4}
    assert asyncio.run(store.get(Collections.VIDEOS, "vid1")) is None
    assert asyncio.run(store.query(Collections.SCENES, {"videoId": "vid1"})) == []
    assert asyncio.run(services.vector_index.count()) == 1
    assert list(storage.objects) == ["scenes/vid2/scene_000.mp4"]

    results = asyncio.run(services.search.query_scenes("scene video"))
    assert [r.scene.video_id for r in results] == ["vid2"]


def test_delete_missing_video(services):
    with pytest.raises(VideoNotFoundError):
        asyncio.run(services.videos.delete_video("nope"))
