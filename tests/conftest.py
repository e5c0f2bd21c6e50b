"""Shared fixtures for the jobsync test-suite."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

import pytest

from jobsync.embeddings import semantic_similarity_percent


class FakeEmbeddingProvider:
    """Deterministic in-memory stand-in for the embedding service."""

    def __init__(self, vectors: Optional[Dict[str, List[float]]] = None, delay: float = 0.0) -> None:
        self.vectors = {key.lower().strip(): value for key, value in (vectors or {}).items()}
        self.delay = delay
        self.calls: List[str] = []

    async def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        return list(self.vectors.get(text.lower().strip(), []))

    def similarity_percent(self, a: List[float], b: List[float]) -> float:
        return semantic_similarity_percent(a, b)


@pytest.fixture
def make_provider():
    return FakeEmbeddingProvider
