"""
Vector index over the ``embeddings`` collection.

Search is a brute-force cosine scan of every stored vector (optionally
restricted to one campaign). That is fine for a few thousand scenes; an ANN
index could replace it as long as ranking stays descending by similarity with
ties in insertion order.
"""

import math
from typing import Any, List, Optional, Sequence

import numpy as np
from loguru import logger

from scenerag.exceptions import DimensionMismatchError, MalformedVectorError
from scenerag.models import Collections, EmbeddingRecord, VectorMatch, VectorMetadata
from scenerag.providers.base import DocumentStore


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between ``a`` and ``b``; 0.0 when either has zero magnitude."""
    if len(a) != len(b):
        raise DimensionMismatchError(len(a), len(b))
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    similarity = float(np.dot(va, vb) / (norm_a * norm_b))
    # Clamp float error so identical vectors never exceed 1
    return max(-1.0, min(1.0, similarity))


def _validate_vector(vector: Any, source: str) -> List[float]:
    if not isinstance(vector, (list, tuple)) or not vector:
        raise MalformedVectorError(f"Vector for {source} is not a non-empty list")
    values = []
    for value in vector:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise MalformedVectorError(f"Vector for {source} contains a non-finite or non-numeric value")
        values.append(float(value))
    return values


class VectorIndex:
    """Persists scene vectors with denormalized metadata and ranks them by cosine similarity."""

    def __init__(self, store: DocumentStore, dimension: int = 768):
        self.store = store
        self.dimension = dimension

    async def upsert(self, scene_id: str, vector: Sequence[float], metadata: VectorMetadata) -> str:
        """Create or replace the entry for ``scene_id``; returns its embedding id."""
        values = _validate_vector(list(vector), scene_id)
        if len(values) != self.dimension:
            raise DimensionMismatchError(self.dimension, len(values))

        record = EmbeddingRecord(
            id=EmbeddingRecord.make_id(scene_id),
            scene_id=scene_id,
            vector=values,
            metadata=metadata,
        )
        await self.store.set(Collections.EMBEDDINGS, record.id, record.to_document())
        logger.debug(f"Upserted embedding {record.id}")
        return record.id

    async def delete(self, embedding_id: str) -> None:
        await self.store.delete(Collections.EMBEDDINGS, embedding_id)

    async def delete_many(self, embedding_ids: List[str]) -> int:
        if not embedding_ids:
            return 0
        return await self.store.batch_delete(Collections.EMBEDDINGS, embedding_ids)

    async def get(self, embedding_id: str) -> Optional[EmbeddingRecord]:
        document = await self.store.get(Collections.EMBEDDINGS, embedding_id)
        if document is None:
            return None
        _validate_vector(document.get("vector"), embedding_id)
        return EmbeddingRecord.from_document(document)

    async def count(self, campaign_id: Optional[str] = None) -> int:
        filters = {"metadata.campaignId": campaign_id} if campaign_id else None
        return await self.store.count(Collections.EMBEDDINGS, filters)

    async def search(
        self,
        query_vector: Sequence[float],
        limit: int = 10,
        campaign_id: Optional[str] = None,
        min_similarity: float = 0.0,
        exclude_scene_ids: Optional[Sequence[str]] = None,
    ) -> List[VectorMatch]:
        """
        Rank stored vectors against ``query_vector``.

        Returns at most ``limit`` matches with similarity >= ``min_similarity``,
        highest first. Raises DimensionMismatchError if a stored vector has a
        different length and MalformedVectorError if one is not numeric.
        """
        filters = {"metadata.campaignId": campaign_id} if campaign_id else None
        documents = await self.store.query(Collections.EMBEDDINGS, filters)
        excluded = set(exclude_scene_ids or ())

        matches: List[VectorMatch] = []
        for document in documents:
            scene_id = document.get("sceneId")
            if scene_id in excluded:
                continue
            stored = _validate_vector(document.get("vector"), document.get("id", scene_id))
            similarity = cosine_similarity(query_vector, stored)
            if similarity < min_similarity:
                continue
            matches.append(
                VectorMatch(
                    scene_id=scene_id,
                    similarity=similarity,
                    metadata=VectorMetadata.from_document(document.get("metadata", {})),
                )
            )

        # list.sort is stable, so equal similarities keep store order
        matches.sort(key=lambda match: match.similarity, reverse=True)
        logger.debug(f"Vector search scanned {len(documents)} entries, {len(matches)} above {min_similarity}")
        return matches[:limit]
