from typing import List, Optional
from pydantic import Field

from scenerag.models import DocumentModel, SearchFilters


class SceneQueryRequest(DocumentModel):
    query: str = Field(..., min_length=1, examples=["energetic car scenes"])
    campaign_id: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1, le=100)
    filters: Optional[SearchFilters] = None


class VisualElementsRequest(DocumentModel):
    elements: List[str] = Field(..., min_length=1, examples=[["car", "road"]])
    campaign_id: Optional[str] = None
    match_all: bool = False
    limit: int = Field(default=20, ge=1, le=100)


class CreateConversationRequest(DocumentModel):
    campaign_id: Optional[str] = None


class SendMessageRequest(DocumentModel):
    message: str = Field(..., min_length=1, examples=["Which scenes show the product?"])
