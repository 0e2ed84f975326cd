import asyncio
import json

import pytest

from scenerag.exceptions import (
    ConversationConflictError,
    ConversationNotFoundError,
    MaxIterationsExceeded,
    ProviderException,
    UnknownFunctionError,
    ValidationException,
)
from scenerag.models import Collections
from scenerag.providers.base import LLMProvider
from scenerag.providers.custom_providers import MemoryDocumentStore
from ..helpers import FakeLLM, FakeStorage, make_scene, make_services, seed_video, text_reply, tool_reply


def build(script, **chat_overrides):
    store = MemoryDocumentStore()
    llm = FakeLLM(script)
    services = make_services(store=store, storage=FakeStorage(), llm=llm, **chat_overrides)

    async def seed():
        await seed_video(store, "vid1", campaign_id="camp1")
        await seed_video(store, "vid2", campaign_id="camp2")
        await services.indexer.save_and_index(
            make_scene("vid1", 0, description="A red car on a coastal road", mood="energetic", visual_elements=["car"])
        )
        await services.indexer.save_and_index(
            make_scene("vid1", 1, description="People smiling at a picnic", mood="happy", visual_elements=["people"])
        )
        await services.indexer.save_and_index(
            make_scene("vid2", 0, campaign_id="camp2", description="Snowy mountain car", visual_elements=["car"])
        )

    asyncio.run(seed())
    return services, llm, store


def test_turn_appends_user_and_assistant_pair():
    services, llm, _ = build([text_reply("The red car scene is the most energetic.")])
    orchestrator = services.orchestrator

    async def run():
        conversation = await orchestrator.create_conversation("camp1")
        reply = await orchestrator.send_message(conversation.id, "show me energetic car scenes")
        return reply, await orchestrator.get_conversation(conversation.id)

    reply, conversation = asyncio.run(run())
    assert reply.content == "The red car scene is the most energetic."
    assert not reply.degraded
    assert [m.role for m in conversation.messages] == ["user", "assistant"]
    assert conversation.messages[0].content == "show me energetic car scenes"
    assert conversation.messages[0].context is None
    assert conversation.version == 1

    context_ids = {scene.id for scene in conversation.messages[1].context.scenes}
    assert context_ids
    assert context_ids <= {"vid1_scene_000", "vid1_scene_001"}

    prompt = llm.calls[0]
    assert prompt[0]["role"] == "system"
    assert "[Scene 1]" in prompt[1]["content"]
    assert prompt[-1] == {"role": "user", "content": "show me energetic car scenes"}
    assert llm.tools_seen[0] is services.orchestrator.tools.declarations


def test_function_round_trip_feeds_results_back():
    services, llm, _ = build([
        tool_reply({"name": "count_scenes", "arguments": {"campaignId": "camp1"}}),
        text_reply("There are 2 scenes."),
    ])

    async def run():
        conversation = await services.orchestrator.create_conversation()
        return await services.orchestrator.send_message(conversation.id, "how many scenes?")

    reply = asyncio.run(run())
    assert reply.content == "There are 2 scenes."
    assert len(llm.calls) == 2
    second = llm.calls[1]
    assert second[-2]["role"] == "assistant"
    assert second[-2]["tool_calls"][0]["function"]["name"] == "count_scenes"
    assert second[-1]["role"] == "tool"
    assert second[-1]["tool_call_id"] == "call_0"
    assert json.loads(second[-1]["content"]) == {"count": 2}


def test_function_loop_stops_after_max_iterations():
    services, llm, store = build(lambda n, messages: tool_reply({"name": "count_campaigns"}), max_iterations=5)

    async def run():
        conversation = await services.orchestrator.create_conversation()
        with pytest.raises(MaxIterationsExceeded):
            await services.orchestrator.send_message(conversation.id, "count forever")
        return await services.orchestrator.get_conversation(conversation.id)

    conversation = asyncio.run(run())
    assert len(llm.calls) == 5
    # Failed turns leave the conversation untouched
    assert conversation.messages == []
    assert conversation.version == 0


def test_unknown_function_aborts_turn():
    services, llm, _ = build([tool_reply({"name": "count_campaigns"}, {"name": "wipe_everything"})])

    async def run():
        conversation = await services.orchestrator.create_conversation()
        with pytest.raises(UnknownFunctionError) as info:
            await services.orchestrator.send_message(conversation.id, "do something odd")
        return info.value, await services.orchestrator.get_conversation(conversation.id)

    error, conversation = asyncio.run(run())
    assert error.function_name == "wipe_everything"
    assert conversation.messages == []
    assert len(llm.calls) == 1


def test_model_outage_returns_degraded_fallback():
    services, _, _ = build([ProviderException("503 from model endpoint")], fallback_message="Try again later.")

    async def run():
        conversation = await services.orchestrator.create_conversation("camp1")
        reply = await services.orchestrator.send_message(conversation.id, "energetic car")
        return reply, await services.orchestrator.get_conversation(conversation.id)

    reply, conversation = asyncio.run(run())
    assert reply.content == "Try again later."
    assert reply.degraded
    assert conversation.messages[1].degraded
    assert conversation.messages[1].context is not None


def test_empty_model_answer_and_missing_model_degrade():
    services, _, _ = build([text_reply("   ")])

    async def run():
        conversation = await services.orchestrator.create_conversation()
        first = await services.orchestrator.send_message(conversation.id, "hello")
        services.orchestrator.llm = None
        second = await services.orchestrator.send_message(conversation.id, "hello again")
        return first, second, await services.orchestrator.get_conversation(conversation.id)

    first, second, conversation = asyncio.run(run())
    assert first.degraded and second.degraded
    assert len(conversation.messages) == 4
    assert conversation.version == 2


def test_history_window_limits_prompt():
    services, llm, _ = build(lambda n, messages: text_reply(f"answer {n}"), history_window=2)

    async def run():
        conversation = await services.orchestrator.create_conversation()
        for i in range(3):
            await services.orchestrator.send_message(conversation.id, f"question {i}")

    asyncio.run(run())
    last_prompt = llm.calls[-1]
    assert [m["content"] for m in last_prompt[2:]] == ["question 1", "answer 2", "question 2"]


def test_concurrent_modification_is_a_conflict():
    class InterferingLLM(LLMProvider):
        def __init__(self, store):
            self.store = store

        async def chat_completion(self, messages, tools=None, **kwargs):
            for document in await self.store.query(Collections.CONVERSATIONS):
                await self.store.update(Collections.CONVERSATIONS, document["id"], {"version": 7})
            return text_reply("late answer")

    services, _, store = build([])
    services.orchestrator.llm = InterferingLLM(store)

    async def run():
        conversation = await services.orchestrator.create_conversation()
        await services.orchestrator.send_message(conversation.id, "hi")

    with pytest.raises(ConversationConflictError):
        asyncio.run(run())


def test_invalid_input():
    services, _, _ = build([])
    with pytest.raises(ValidationException):
        asyncio.run(services.orchestrator.send_message("any", "  "))
    with pytest.raises(ConversationNotFoundError):
        asyncio.run(services.orchestrator.send_message("missing", "hello"))
