import asyncio

from scenerag.models import SearchOptions
from scenerag.retrieval import SearchStrategy
from ..helpers import make_scene, seed_video


def seed_scenes(services, store):
    scenes = [
        make_scene("vid1", 0, description="A red car speeds along the road", mood="energetic",
                   visual_elements=["car", "road"], confidence=0.4),
        make_scene("vid1", 1, description="Kids play with a dog in the park", mood="happy",
                   visual_elements=["dog", "park"], confidence=0.9),
        make_scene("vid1", 2, description="The car parks outside a cafe", mood="calm",
                   visual_elements=["car", "cafe"], confidence=0.7),
        make_scene("vid2", 0, description="Night drive with the car headlights on", mood="calm",
                   visual_elements=["car"], confidence=0.6),
    ]

    async def run():
        await seed_video(store, "vid1")
        await seed_video(store, "vid2")
        for scene in scenes:
            await services.indexer.save_and_index(scene)

    asyncio.run(run())
    return scenes


def assert_ranked(scored):
    scores = [s.match_score for s in scored]
    assert scores == sorted(scores, reverse=True)


def test_vector_results_are_ranked_by_similarity(services, store):
    seed_scenes(services, store)
    scored = asyncio.run(services.retriever.retrieve("red car driving on the road at speed"))

    assert len(scored) == 4
    assert_ranked(scored)
    assert all(s.vector_similarity == s.match_score for s in scored)


def test_filtered_results_are_ranked_by_lexical_score(services, store):
    seed_scenes(services, store)
    scored = asyncio.run(services.retriever.retrieve("campaign:camp1 car"))

    assert len(scored) == 4
    assert_ranked(scored)
    assert all(s.vector_similarity is None for s in scored)
    # Keyword bonuses outweigh the higher confidence of the scene without a car
    assert scored[0].scene.id == "vid1_scene_002"
    assert scored[-1].scene.id == "vid1_scene_001"


def test_forced_strategy_and_exclusions(services, store):
    scenes = seed_scenes(services, store)
    scored = asyncio.run(services.retriever.retrieve(
        "car",
        SearchOptions(limit=10),
        strategy=SearchStrategy.SEMANTIC,
        exclude_scene_ids=[scenes[0].id],
    ))

    assert scenes[0].id not in {s.scene.id for s in scored}
    assert_ranked(scored)


def test_raw_text_retrieval_keeps_tokens_as_text(services, store):
    scenes = seed_scenes(services, store)
    scored = asyncio.run(services.retriever.retrieve_by_text(
        "mood:happy car road", exclude_scene_ids=[scenes[1].id]
    ))

    ids = {s.scene.id for s in scored}
    assert scenes[1].id not in ids
    assert {scenes[0].id, scenes[2].id, scenes[3].id} <= ids
    assert_ranked(scored)
