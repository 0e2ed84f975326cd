"""
Lexical query routing.

This is a keyword heuristic, not a trained classifier. It decides between a
structured store query (``filtered``) and vector search (``semantic`` or
``general``) from surface features of the text only. Anything smarter can
replace :class:`QueryRouter` as long as it returns the same strategies.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Optional

DEFAULT_SEMANTIC_KEYWORDS = (
    "like", "similar", "showing", "with", "about", "featuring",
    "scene", "video", "moment", "part", "feel", "mood", "vibe",
    "happy", "sad", "energetic", "calm", "exciting", "emotional",
)

FILTER_PREFIXES = ("id:", "campaign:", "product:")
DESCRIPTIVE_TOKEN_COUNT = 3

_TOKEN_RE = re.compile(r"\b(id|campaign|product|mood):(\S+)", re.IGNORECASE)
_EXACT_RE = re.compile(r"\bexact\b", re.IGNORECASE)
_WORD_RE = re.compile(r"[a-z0-9']+")


class SearchStrategy(str, Enum):
    SEMANTIC = "semantic"
    FILTERED = "filtered"
    GENERAL = "general"

    @property
    def uses_vectors(self) -> bool:
        return self is not SearchStrategy.FILTERED


@dataclass
class RoutedQuery:
    """Strategy plus whatever structure could be pulled out of the query."""

    strategy: SearchStrategy
    text: str
    tokens: Dict[str, str] = field(default_factory=dict)

    @property
    def scene_id(self) -> Optional[str]:
        return self.tokens.get("id")

    @property
    def campaign_id(self) -> Optional[str]:
        return self.tokens.get("campaign")

    @property
    def product(self) -> Optional[str]:
        return self.tokens.get("product")

    @property
    def mood(self) -> Optional[str]:
        return self.tokens.get("mood")


class QueryRouter:
    """Classifies free-text queries into a search strategy.

    Priority: a structured token (``id:``, ``campaign:``, ``product:``) or the
    word ``exact`` means ``filtered``; otherwise a semantic keyword or more than
    three words means ``semantic``; anything else is ``general``.

    Keywords match whole words, plain or with a trailing "s" (``scenes``
    matches ``scene``), never as arbitrary substrings: ``likeness`` is not
    ``like``.
    """

    def __init__(self, semantic_keywords: Optional[Iterable[str]] = None):
        keywords = semantic_keywords if semantic_keywords is not None else DEFAULT_SEMANTIC_KEYWORDS
        self.semantic_keywords = frozenset(k.lower() for k in keywords)

    def classify(self, query: str) -> SearchStrategy:
        lowered = query.lower()
        if any(prefix in lowered for prefix in FILTER_PREFIXES) or _EXACT_RE.search(query):
            return SearchStrategy.FILTERED

        if self._has_keyword(lowered) or len(query.split()) > DESCRIPTIVE_TOKEN_COUNT:
            return SearchStrategy.SEMANTIC

        return SearchStrategy.GENERAL

    def _has_keyword(self, lowered: str) -> bool:
        for word in _WORD_RE.findall(lowered):
            if word in self.semantic_keywords:
                return True
            if word.endswith("s") and word[:-1] in self.semantic_keywords:
                return True
        return False

    def route(self, query: str) -> RoutedQuery:
        tokens: Dict[str, str] = {}
        for match in _TOKEN_RE.finditer(query):
            # First occurrence of a key wins
            tokens.setdefault(match.group(1).lower(), match.group(2))

        text = _TOKEN_RE.sub(" ", query)
        text = _EXACT_RE.sub(" ", text)
        text = " ".join(text.split())
        return RoutedQuery(strategy=self.classify(query), text=text, tokens=tokens)
