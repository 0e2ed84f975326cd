"""
Domain models

Pydantic models for scenes, embeddings, conversations and search results.
Stored documents use camelCase keys (``campaignId``, ``analysis.mood``);
Python code uses the snake_case attribute names.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentModel(BaseModel):
    """Base for every model that round-trips through the document store."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_document(cls, data: Dict[str, Any]):
        return cls.model_validate(data)


class SceneAnalysis(DocumentModel):
    """Structured AI analysis of one scene."""

    visual_elements: List[str] = Field(default_factory=list, description="Distinct objects/people/settings visible")
    actions: List[str] = Field(default_factory=list)
    mood: str = Field(default="unknown")
    composition: str = Field(default="unknown")
    product: Optional[str] = Field(default=None)
    cta: Optional[str] = Field(default=None)
    colors: List[str] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    @field_validator("visual_elements")
    @classmethod
    def dedupe_elements(cls, v: List[str]) -> List[str]:
        seen = set()
        unique = []
        for element in v:
            if element not in seen:
                seen.add(element)
                unique.append(element)
        return unique


class Scene(DocumentModel):
    """A contiguous time interval of one video."""

    id: str
    video_id: str
    campaign_id: str
    scene_number: int = Field(..., ge=0)
    start_time: float = Field(..., ge=0)
    end_time: float = Field(..., ge=0)
    duration: Optional[float] = Field(default=None)
    transcript: str = Field(default="")
    description: str = Field(default="")
    analysis: SceneAnalysis = Field(default_factory=SceneAnalysis)
    embedding_id: Optional[str] = Field(default=None)
    clip_url: Optional[str] = Field(default=None)
    thumbnail_url: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def check_time_range(self):
        if self.end_time < self.start_time:
            raise ValueError(
                f"Scene {self.id} ends before it starts ({self.start_time}s - {self.end_time}s)"
            )
        expected = self.end_time - self.start_time
        if self.duration is None:
            self.duration = expected
        elif abs(self.duration - expected) > 1e-6:
            raise ValueError(
                f"Scene {self.id} duration {self.duration} does not match end - start ({expected})"
            )
        return self

    @staticmethod
    def make_id(video_id: str, scene_number: int) -> str:
        return f"{video_id}_scene_{scene_number:03d}"


class VideoStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Video(DocumentModel):
    id: str
    campaign_id: str
    file_name: str
    duration: float = Field(default=0.0, ge=0)
    status: VideoStatus = Field(default=VideoStatus.COMPLETED)
    uploaded_at: datetime = Field(default_factory=utc_now)


class Campaign(DocumentModel):
    id: str
    name: str
    description: Optional[str] = None
    video_count: int = Field(default=0, ge=0)
    total_duration: float = Field(default=0.0, ge=0)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class VectorMetadata(DocumentModel):
    """Denormalized scene snapshot stored next to its vector."""

    campaign_id: str
    video_id: str
    scene_number: int
    start_time: float
    end_time: float
    description: str = ""
    transcript: str = ""
    visual_elements: List[str] = Field(default_factory=list)
    mood: str = "unknown"
    product: Optional[str] = None

    @classmethod
    def from_scene(cls, scene: Scene) -> "VectorMetadata":
        return cls(
            campaign_id=scene.campaign_id,
            video_id=scene.video_id,
            scene_number=scene.scene_number,
            start_time=scene.start_time,
            end_time=scene.end_time,
            description=scene.description,
            transcript=scene.transcript,
            visual_elements=list(scene.analysis.visual_elements),
            mood=scene.analysis.mood,
            product=scene.analysis.product,
        )


class EmbeddingRecord(DocumentModel):
    id: str
    scene_id: str
    vector: List[float]
    metadata: VectorMetadata
    created_at: datetime = Field(default_factory=utc_now)

    @staticmethod
    def make_id(scene_id: str) -> str:
        return f"emb_{scene_id}"


class VectorMatch(BaseModel):
    scene_id: str
    similarity: float
    metadata: VectorMetadata


class MessageContext(DocumentModel):
    scenes: List[Scene] = Field(default_factory=list)


class Message(DocumentModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=utc_now)
    context: Optional[MessageContext] = None
    degraded: bool = False

    @model_validator(mode="after")
    def context_only_on_assistant(self):
        if self.context is not None and self.role != "assistant":
            raise ValueError("Only assistant messages may carry retrieved context")
        return self


class Conversation(DocumentModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    campaign_id: Optional[str] = None
    messages: List[Message] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    version: int = Field(default=0, ge=0)


class SearchFilters(DocumentModel):
    mood: Optional[str] = None
    product: Optional[str] = None
    min_confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    visual_elements: Optional[List[str]] = None


class SearchOptions(DocumentModel):
    campaign_id: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1)
    filters: Optional[SearchFilters] = None


class ScoredScene(BaseModel):
    """A retrieved scene with the score used to rank it."""

    scene: Scene
    match_score: float
    vector_similarity: Optional[float] = None


class VideoSummary(DocumentModel):
    id: str
    file_name: str
    duration: float


class SearchResult(DocumentModel):
    scene: Scene
    video: VideoSummary
    score: float
    highlights: List[str] = Field(default_factory=list)


class Collections:
    """Document store collection names."""

    SCENES = "scenes"
    VIDEOS = "videos"
    CAMPAIGNS = "campaigns"
    EMBEDDINGS = "embeddings"
    CONVERSATIONS = "conversations"
