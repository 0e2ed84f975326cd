"""Deterministic bag-of-hashed-tokens embedding used when no backend answers."""

import re
from typing import List

import numpy as np

SPREAD = 10
STRIDE = 97
_TOKEN_RE = re.compile(r"\w+")


def stable_hash(token: str) -> int:
    """32-bit polynomial string hash; unlike ``hash()`` it is not salted per process."""
    h = 0
    for ch in token:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    return h


def tokenize(text: str) -> List[str]:
    return _TOKEN_RE.findall(text.lower())


def local_embedding(text: str, dimension: int = 768) -> List[float]:
    """
    Hash every word to ``SPREAD`` positions and L2-normalize.

    Word ``n`` (0-based) adds ``1 / (n + 1)`` at positions
    ``(stable_hash(word) + i * STRIDE) % dimension`` for ``i`` in ``0..SPREAD-1``.
    Empty or token-free input yields the zero vector.
    """
    vector = np.zeros(dimension, dtype=np.float64)
    for index, token in enumerate(tokenize(text)):
        h = stable_hash(token)
        weight = 1.0 / (index + 1)
        for i in range(SPREAD):
            vector[(h + i * STRIDE) % dimension] += weight

    norm = np.linalg.norm(vector)
    if norm == 0:
        return vector.tolist()
    return (vector / norm).tolist()
