from typing import Any, Dict, List, Optional
from loguru import logger
from scenerag.exceptions import StoreError
from scenerag.providers.base import DocumentStore
from .memory_document_store import MemoryDocumentStore


class FallbackDocumentStore(DocumentStore):
    """Routes calls to a primary store until it fails, then to memory.

    The switch is one-way for the lifetime of the instance. Data written to
    the primary before the failure is not copied over.
    """

    def __init__(self, primary: DocumentStore, secondary: Optional[DocumentStore] = None):
        self.primary = primary
        self.secondary = secondary or MemoryDocumentStore()
        self.degraded = False

    async def _call(self, method: str, *args, **kwargs):
        if not self.degraded:
            try:
                return await getattr(self.primary, method)(*args, **kwargs)
            except StoreError as e:
                self.degraded = True
                logger.warning(
                    f"Primary document store failed during {method} ({e}); "
                    f"continuing with in-memory store"
                )
        return await getattr(self.secondary, method)(*args, **kwargs)

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        return await self._call("get", collection, doc_id)

    async def query(self, collection, filters=None, order_by=None, descending=False, limit=None):
        return await self._call("query", collection, filters, order_by, descending, limit)

    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        await self._call("set", collection, doc_id, data)

    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        await self._call("update", collection, doc_id, data)

    async def delete(self, collection: str, doc_id: str) -> None:
        await self._call("delete", collection, doc_id)

    async def batch_delete(self, collection: str, doc_ids: List[str]) -> int:
        return await self._call("batch_delete", collection, doc_ids)

    async def close(self):
        await self.primary.close()
        await self.secondary.close()
