"""Hybrid scene retrieval: routing, vector and filtered search, enrichment."""

from .vector_index import VectorIndex, cosine_similarity
from .query_router import QueryRouter, RoutedQuery, SearchStrategy
from .scene_retriever import SceneRetriever
from .result_enricher import ResultEnricher, lexical_score, extract_highlights
from .search_service import SearchService

__all__ = [
    "VectorIndex",
    "cosine_similarity",
    "QueryRouter",
    "RoutedQuery",
    "SearchStrategy",
    "SceneRetriever",
    "ResultEnricher",
    "lexical_score",
    "extract_highlights",
    "SearchService",
]
