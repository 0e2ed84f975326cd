from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class DocumentStore(ABC):
    """Abstract base class for document stores.

    Documents are JSON-compatible dicts keyed by ``(collection, id)``. Filter
    keys may address one level of nesting with a dot (``analysis.mood``).
    Implementations raise ``StoreError`` when the backend is unavailable.
    """

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return the document or None."""
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Equality-filtered scan. Without ``order_by`` results keep insertion order."""
        pass

    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or overwrite a document."""
        pass

    @abstractmethod
    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Merge top-level fields into an existing document."""
        pass

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document. Missing documents are not an error."""
        pass

    @abstractmethod
    async def batch_delete(self, collection: str, doc_ids: List[str]) -> int:
        """Delete many documents; returns how many existed."""
        pass

    async def count(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> int:
        return len(await self.query(collection, filters))

    async def close(self):
        pass
