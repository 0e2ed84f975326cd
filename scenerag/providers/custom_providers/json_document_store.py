import asyncio
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional
import aiofiles
from loguru import logger
from scenerag.exceptions import StoreError
from scenerag.providers.base import DocumentStore
from scenerag.utils.error_handler import convert_exceptions
from .memory_document_store import select


class JsonFileDocumentStore(DocumentStore):
    """Document store persisted as one JSON file per collection.

    Each collection is loaded on first use and rewritten in full on every
    mutation (written to a temp file, then renamed over the original).
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.base_path = Path(config.get("path", "scenerag_store")).resolve()
        self._cache: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = asyncio.Lock()

    def _file(self, collection: str) -> Path:
        return self.base_path / f"{collection}.json"

    async def _load(self, collection: str) -> Dict[str, Dict[str, Any]]:
        if collection in self._cache:
            return self._cache[collection]
        path = self._file(collection)
        documents: Dict[str, Dict[str, Any]] = {}
        if path.exists():
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                raw = await f.read()
            documents = json.loads(raw) if raw.strip() else {}
            logger.debug(f"Loaded {len(documents)} documents from {path}")
        self._cache[collection] = documents
        return documents

    async def _flush(self, collection: str) -> None:
        self.base_path.mkdir(parents=True, exist_ok=True)
        path = self._file(collection)
        tmp_path = path.with_suffix(".json.tmp")
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(self._cache[collection], ensure_ascii=False))
        os.replace(tmp_path, path)

    @convert_exceptions({OSError: StoreError, ValueError: StoreError})
    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        async with self._lock:
            documents = await self._load(collection)
            found = select([documents[doc_id]]) if doc_id in documents else []
        return found[0] if found else None

    @convert_exceptions({OSError: StoreError, ValueError: StoreError})
    async def query(self, collection, filters=None, order_by=None, descending=False, limit=None):
        async with self._lock:
            documents = await self._load(collection)
            return select(list(documents.values()), filters, order_by, descending, limit)

    @convert_exceptions({OSError: StoreError, ValueError: StoreError})
    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        async with self._lock:
            documents = await self._load(collection)
            documents[doc_id] = json.loads(json.dumps(data))
            await self._flush(collection)

    @convert_exceptions({OSError: StoreError, ValueError: StoreError})
    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        async with self._lock:
            documents = await self._load(collection)
            merged = dict(documents.get(doc_id, {}))
            merged.update(json.loads(json.dumps(data)))
            documents[doc_id] = merged
            await self._flush(collection)

    @convert_exceptions({OSError: StoreError, ValueError: StoreError})
    async def delete(self, collection: str, doc_id: str) -> None:
        async with self._lock:
            documents = await self._load(collection)
            if documents.pop(doc_id, None) is not None:
                await self._flush(collection)

    @convert_exceptions({OSError: StoreError, ValueError: StoreError})
    async def batch_delete(self, collection: str, doc_ids: List[str]) -> int:
        async with self._lock:
            documents = await self._load(collection)
            removed = sum(1 for doc_id in doc_ids if documents.pop(doc_id, None) is not None)
            if removed:
                await self._flush(collection)
        return removed
