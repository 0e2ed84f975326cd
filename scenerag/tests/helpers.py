"""Builders and fake collaborators shared by the test suite."""

from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from scenerag.config.settings import (
    ChatConfig,
    EmbeddingConfig,
    RetrievalConfig,
    SceneRAGConfig,
    StorageConfig,
)
from scenerag.container import Services, build_services
from scenerag.exceptions import ProviderException, StoreError
from scenerag.models import Campaign, Collections, Scene, SceneAnalysis, Video
from scenerag.providers.base import DocumentStore, EmbeddingProvider, LLMProvider, StorageProvider
from scenerag.providers.custom_providers import MemoryDocumentStore

DIMENSION = 256


def make_scene(
    video_id: str = "vid1",
    scene_number: int = 0,
    campaign_id: str = "camp1",
    description: str = "",
    transcript: str = "",
    mood: str = "neutral",
    visual_elements: Sequence[str] = (),
    product: Optional[str] = None,
    confidence: float = 0.8,
    start_time: Optional[float] = None,
    length: float = 5.0,
) -> Scene:
    start = scene_number * length if start_time is None else start_time
    return Scene(
        id=Scene.make_id(video_id, scene_number),
        video_id=video_id,
        campaign_id=campaign_id,
        scene_number=scene_number,
        start_time=start,
        end_time=start + length,
        description=description,
        transcript=transcript,
        analysis=SceneAnalysis(
            visual_elements=list(visual_elements),
            mood=mood,
            product=product,
            confidence=confidence,
        ),
    )


async def seed_video(
    store: DocumentStore,
    video_id: str = "vid1",
    campaign_id: str = "camp1",
    file_name: Optional[str] = None,
    duration: float = 30.0,
) -> Video:
    video = Video(id=video_id, campaign_id=campaign_id, file_name=file_name or f"{video_id}.mp4", duration=duration)
    await store.set(Collections.VIDEOS, video.id, video.to_document())
    return video


async def seed_campaign(store: DocumentStore, campaign_id: str = "camp1", name: str = "Spring Launch", **fields) -> Campaign:
    campaign = Campaign(id=campaign_id, name=name, **fields)
    await store.set(Collections.CAMPAIGNS, campaign.id, campaign.to_document())
    return campaign


class FakeStorage(StorageProvider):
    """In-memory object storage with predictable signed URLs."""

    def __init__(self, failing_paths: Sequence[str] = ()):
        self.objects: Dict[str, bytes] = {}
        self.failing_paths = set(failing_paths)
        self.signed: List[str] = []

    async def upload(self, data, path: str, **kwargs) -> str:
        self.objects[path] = data if isinstance(data, bytes) else data.encode()
        return f"mem://{path}"

    async def delete(self, path: str) -> None:
        self.objects.pop(path, None)

    async def delete_by_prefix(self, prefix: str) -> int:
        doomed = [path for path in self.objects if path.startswith(prefix)]
        for path in doomed:
            del self.objects[path]
        return len(doomed)

    async def get_signed_url(self, path: str, ttl_seconds: int) -> str:
        if path in self.failing_paths:
            raise ProviderException(f"cannot sign {path}")
        self.signed.append(path)
        return f"https://storage.test/{path}?ttl={ttl_seconds}"


class FailingStore(MemoryDocumentStore):
    """A store whose reads and writes fail once ``broken`` is set."""

    def __init__(self, broken: bool = True):
        super().__init__()
        self.broken = broken
        self.calls = 0

    def _check(self):
        self.calls += 1
        if self.broken:
            raise StoreError("store offline")

    async def get(self, collection, doc_id):
        self._check()
        return await super().get(collection, doc_id)

    async def query(self, collection, filters=None, order_by=None, descending=False, limit=None):
        self._check()
        return await super().query(collection, filters, order_by, descending, limit)

    async def set(self, collection, doc_id, data):
        self._check()
        await super().set(collection, doc_id, data)

    async def update(self, collection, doc_id, data):
        self._check()
        await super().update(collection, doc_id, data)

    async def delete(self, collection, doc_id):
        self._check()
        await super().delete(collection, doc_id)

    async def batch_delete(self, collection, doc_ids):
        self._check()
        return await super().batch_delete(collection, doc_ids)


class ScriptedEmbeddingBackend(EmbeddingProvider):
    """Raises the queued errors first, then returns ``vector``."""

    def __init__(self, errors: Sequence[Exception] = (), vector: Optional[List[float]] = None):
        self.errors = list(errors)
        self.vector = vector or [1.0] + [0.0] * (DIMENSION - 1)
        self.calls: List[Dict[str, Any]] = []

    async def embedding(self, text: str, **kwargs) -> List[float]:
        self.calls.append({"text": text, **kwargs})
        if self.errors:
            raise self.errors.pop(0)
        return list(self.vector)

    async def batch_embedding(self, texts, **kwargs):
        return [await self.embedding(text, **kwargs) for text in texts]


def text_reply(content: str) -> Dict[str, Any]:
    return {"content": content, "tool_calls": [], "finish_reason": "stop", "usage": None, "model": "fake"}


def tool_reply(*calls: Dict[str, Any]) -> Dict[str, Any]:
    tool_calls = [
        {"id": f"call_{i}", "name": call["name"], "arguments": call.get("arguments", {})}
        for i, call in enumerate(calls)
    ]
    return {"content": None, "tool_calls": tool_calls, "finish_reason": "tool_calls", "usage": None, "model": "fake"}


class FakeLLM(LLMProvider):
    """Replays scripted replies; a callable script is asked for every reply."""

    def __init__(self, script: Union[List[Any], Callable[[int, List[Dict]], Any]]):
        self.script = script
        self.calls: List[List[Dict[str, Any]]] = []
        self.tools_seen: List[Any] = []

    async def chat_completion(self, messages, tools=None, **kwargs):
        self.calls.append([dict(message) for message in messages])
        self.tools_seen.append(tools)
        if callable(self.script):
            reply = self.script(len(self.calls), messages)
        else:
            reply = self.script[len(self.calls) - 1]
        if isinstance(reply, Exception):
            raise reply
        return reply


def make_config(**chat_overrides) -> SceneRAGConfig:
    return SceneRAGConfig().with_sections(
        embedding=EmbeddingConfig(provider="local", dimension=DIMENSION),
        storage=StorageConfig(provider="local", signed_url_ttl_seconds=3600),
        retrieval=RetrievalConfig(),
        chat=ChatConfig(**chat_overrides),
    )


def make_services(
    store: Optional[DocumentStore] = None,
    storage: Optional[StorageProvider] = None,
    llm: Optional[LLMProvider] = None,
    **chat_overrides,
) -> Services:
    return build_services(
        make_config(**chat_overrides),
        store=store or MemoryDocumentStore(),
        storage=storage or FakeStorage(),
        llm=llm or FakeLLM([text_reply("ok")] * 10),
    )
