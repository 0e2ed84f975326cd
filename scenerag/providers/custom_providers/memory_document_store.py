import copy
from typing import Any, Dict, List, Optional
from loguru import logger
from scenerag.providers.base import DocumentStore

_MISSING = object()


def get_field(document: Dict[str, Any], key: str) -> Any:
    """Resolve a dotted key (``analysis.mood``) against a document."""
    value: Any = document
    for part in key.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def matches(document: Dict[str, Any], filters: Optional[Dict[str, Any]]) -> bool:
    if not filters:
        return True
    return all(get_field(document, key) == expected for key, expected in filters.items())


def select(
    documents: List[Dict[str, Any]],
    filters: Optional[Dict[str, Any]] = None,
    order_by: Optional[str] = None,
    descending: bool = False,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Filter, order and cap a list of documents. Missing sort keys go last."""
    selected = [doc for doc in documents if matches(doc, filters)]
    if order_by:
        present = [doc for doc in selected if get_field(doc, order_by) not in (_MISSING, None)]
        absent = [doc for doc in selected if get_field(doc, order_by) in (_MISSING, None)]
        present.sort(key=lambda doc: get_field(doc, order_by), reverse=descending)
        selected = present + absent
    if limit is not None:
        selected = selected[:limit]
    return [copy.deepcopy(doc) for doc in selected]


class MemoryDocumentStore(DocumentStore):
    """In-process document store. Collections keep insertion order."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        logger.debug("MemoryDocumentStore initialized")

    def _collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(name, {})

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        document = self._collection(collection).get(doc_id)
        return copy.deepcopy(document) if document is not None else None

    async def query(self, collection, filters=None, order_by=None, descending=False, limit=None):
        return select(list(self._collection(collection).values()), filters, order_by, descending, limit)

    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self._collection(collection)[doc_id] = copy.deepcopy(data)

    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        documents = self._collection(collection)
        merged = dict(documents.get(doc_id, {}))
        merged.update(copy.deepcopy(data))
        documents[doc_id] = merged

    async def delete(self, collection: str, doc_id: str) -> None:
        self._collection(collection).pop(doc_id, None)

    async def batch_delete(self, collection: str, doc_ids: List[str]) -> int:
        documents = self._collection(collection)
        removed = 0
        for doc_id in doc_ids:
            if documents.pop(doc_id, None) is not None:
                removed += 1
        return removed
