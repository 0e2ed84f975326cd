from typing import List, Optional
from loguru import logger

from scenerag.exceptions import ConversationConflictError, ConversationNotFoundError
from scenerag.models import Collections, Conversation, utc_now
from scenerag.providers.base import DocumentStore


class ConversationStore:
    """
    Conversation persistence with an optimistic ``version`` check.

    ``save`` re-reads the stored version before writing. The read and the
    write are two separate store calls, so two turns racing on the same
    conversation can still both pass the check; the window is small but the
    store offers no compare-and-set.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    async def create(self, campaign_id: Optional[str] = None) -> Conversation:
        conversation = Conversation(campaign_id=campaign_id)
        await self.store.set(Collections.CONVERSATIONS, conversation.id, conversation.to_document())
        logger.info(f"Created conversation {conversation.id} (campaign={campaign_id})")
        return conversation

    async def get(self, conversation_id: str) -> Conversation:
        document = await self.store.get(Collections.CONVERSATIONS, conversation_id)
        if document is None:
            raise ConversationNotFoundError(conversation_id)
        return Conversation.from_document(document)

    async def list(self, campaign_id: Optional[str] = None, limit: int = 20) -> List[Conversation]:
        filters = {"campaignId": campaign_id} if campaign_id else None
        documents = await self.store.query(
            Collections.CONVERSATIONS, filters, order_by="updatedAt", descending=True, limit=limit
        )
        return [Conversation.from_document(doc) for doc in documents]

    async def save(self, conversation: Conversation, expected_version: int) -> Conversation:
        current = await self.store.get(Collections.CONVERSATIONS, conversation.id)
        if current is None:
            raise ConversationNotFoundError(conversation.id)
        stored_version = current.get("version", 0)
        if stored_version != expected_version:
            raise ConversationConflictError(
                f"Conversation {conversation.id} was modified concurrently "
                f"(expected version {expected_version}, found {stored_version})",
                details={"conversation_id": conversation.id},
            )
        conversation.version = expected_version + 1
        conversation.updated_at = utc_now()
        await self.store.set(Collections.CONVERSATIONS, conversation.id, conversation.to_document())
        return conversation

    async def delete(self, conversation_id: str) -> None:
        await self.store.delete(Collections.CONVERSATIONS, conversation_id)
        logger.info(f"Deleted conversation {conversation_id}")
