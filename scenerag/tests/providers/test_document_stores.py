import asyncio
import json

import pytest

from scenerag.exceptions import StoreError
from scenerag.providers.custom_providers import (
    FallbackDocumentStore,
    JsonFileDocumentStore,
    MemoryDocumentStore,
)
from scenerag.providers.custom_providers.memory_document_store import get_field, matches, select
from ..helpers import FailingStore


def test_get_field_resolves_dotted_keys():
    document = {"analysis": {"mood": "happy"}, "id": "s1"}
    assert get_field(document, "analysis.mood") == "happy"
    assert get_field(document, "id") == "s1"
    assert matches(document, {"analysis.mood": "happy", "id": "s1"})
    assert not matches({"x": 1}, {"analysis.mood": None})


def test_select_orders_with_missing_keys_last_and_limits():
    docs = [{"id": "a", "n": 2}, {"id": "b"}, {"id": "c", "n": 5}, {"id": "d", "n": 1}]
    ordered = select(docs, order_by="n", descending=True)
    assert [doc["id"] for doc in ordered] == ["c", "a", "d", "b"]
    assert [doc["id"] for doc in select(docs, order_by="n", limit=2)] == ["d", "a"]


def test_memory_store_returns_copies():
    async def run():
        store = MemoryDocumentStore()
        await store.set("scenes", "s1", {"id": "s1", "analysis": {"mood": "calm"}})
        doc = await store.get("scenes", "s1")
        doc["analysis"]["mood"] = "changed"
        again = await store.get("scenes", "s1")
        assert again["analysis"]["mood"] == "calm"

        await store.update("scenes", "s1", {"embeddingId": "emb_s1"})
        assert (await store.get("scenes", "s1"))["embeddingId"] == "emb_s1"
        assert await store.query("scenes", {"analysis.mood": "calm"}) == [await store.get("scenes", "s1")]
        assert await store.count("scenes") == 1
        assert await store.batch_delete("scenes", ["s1", "missing"]) == 1
        await store.delete("scenes", "missing")
        assert await store.get("scenes", "s1") is None

    asyncio.run(run())


def test_json_store_persists_across_instances(tmp_path):
    async def run():
        first = JsonFileDocumentStore({"path": str(tmp_path)})
        await first.set("videos", "v1", {"id": "v1", "campaignId": "c1"})
        await first.set("videos", "v2", {"id": "v2", "campaignId": "c2"})
        await first.delete("videos", "v2")

        second = JsonFileDocumentStore({"path": str(tmp_path)})
        assert await second.get("videos", "v1") == {"id": "v1", "campaignId": "c1"}
        assert await second.get("videos", "v2") is None
        assert await second.query("videos", {"campaignId": "c1"}) == [{"id": "v1", "campaignId": "c1"}]

    asyncio.run(run())
    on_disk = json.loads((tmp_path / "videos.json").read_text(encoding="utf-8"))
    assert list(on_disk) == ["v1"]


def test_json_store_wraps_corrupt_file_as_store_error(tmp_path):
    (tmp_path / "scenes.json").write_text("{not json", encoding="utf-8")
    store = JsonFileDocumentStore({"path": str(tmp_path)})
    with pytest.raises(StoreError):
        asyncio.run(store.get("scenes", "s1"))


def test_fallback_store_switches_to_memory_once_primary_fails():
    async def run():
        primary = FailingStore(broken=False)
        store = FallbackDocumentStore(primary)
        await store.set("campaigns", "c1", {"id": "c1"})
        assert not store.degraded

        primary.broken = True
        assert await store.get("campaigns", "c1") is None
        assert store.degraded

        await store.set("campaigns", "c2", {"id": "c2"})
        primary.broken = False
        # The switch is one-way
        assert await store.get("campaigns", "c2") == {"id": "c2"}
        assert await primary.get("campaigns", "c2") is None

    asyncio.run(run())
