"""Semantic similarity collaborator used by the skill matcher.

The engine only depends on the :class:`EmbeddingProvider` protocol: something
that turns a short phrase into a fixed-length vector (an empty list on
failure, never an exception) and compares two vectors as a percentage.
:class:`HuggingFaceEmbeddingProvider` talks to a sentence-transformers
feature-extraction endpoint; :class:`EmbeddingCache` memoises lookups for the
duration of one ranking batch.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol

import numpy as np
import requests

from .config import DEFAULT_EMBEDDINGS_URL, Settings
from .errors import EmbeddingError
from .logging_config import log_context

logger = logging.getLogger(__name__)

Embedding = List[float]


def cosine_similarity(a: Embedding, b: Embedding) -> float:
    """Cosine similarity in [-1, 1]; 0 for empty, mismatched or zero vectors."""

    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    if va.size == 0 or vb.size == 0 or va.shape != vb.shape:
        return 0.0
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if not norm_a or not norm_b:
        return 0.0
    return float(np.dot(va, vb) / (norm_a * norm_b))


def semantic_similarity_percent(a: Embedding, b: Embedding) -> float:
    """Map cosine similarity [-1, 1] onto [0, 100]."""

    percent = (cosine_similarity(a, b) + 1) / 2 * 100
    return max(0.0, min(100.0, percent))


class EmbeddingProvider(Protocol):
    async def embed(self, text: str) -> Embedding:
        ...

    def similarity_percent(self, a: Embedding, b: Embedding) -> float:
        ...


class NullEmbeddingProvider:
    """Provider used when no embedding service is configured."""

    async def embed(self, text: str) -> Embedding:
        return []

    def similarity_percent(self, a: Embedding, b: Embedding) -> float:
        return semantic_similarity_percent(a, b)


def pool_embedding(data: Any) -> Embedding:
    """Reduce an API payload to a single sentence vector.

    Accepts ``[dim]``, ``[[dim]]`` or a token matrix ``[[dim], [dim], ...]``
    which is mean-pooled.
    """

    try:
        array = np.asarray(data, dtype=float)
    except (TypeError, ValueError) as exc:
        raise EmbeddingError(f"unexpected embedding payload: {exc}") from exc

    if array.ndim == 1 and array.size:
        return array.tolist()
    if array.ndim == 2 and array.shape[0] and array.shape[1]:
        if array.shape[0] == 1:
            return array[0].tolist()
        return array.mean(axis=0).tolist()
    raise EmbeddingError(f"unexpected embedding shape: {array.shape}")


class HuggingFaceEmbeddingProvider:
    """Sentence embeddings from the Hugging Face inference API."""

    def __init__(
        self,
        api_key: Optional[str],
        url: str = DEFAULT_EMBEDDINGS_URL,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self._warned_missing_key = False

    async def embed(self, text: str) -> Embedding:
        if not self.api_key:
            if not self._warned_missing_key:
                logger.warning(
                    "HF_API_KEY is not set; skill similarity falls back to string matching only"
                )
                self._warned_missing_key = True
            return []

        try:
            return await asyncio.to_thread(self._fetch, text)
        except (EmbeddingError, requests.RequestException) as exc:
            logger.error(log_context("Failed to fetch embedding", text=text, error=str(exc)))
            return []

    def similarity_percent(self, a: Embedding, b: Embedding) -> float:
        return semantic_similarity_percent(a, b)

    def _fetch(self, text: str) -> Embedding:
        response = self.session.post(
            self.url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json={"inputs": [text]},
            timeout=self.timeout,
        )
        if not response.ok:
            raise EmbeddingError(
                f"embedding API error {response.status_code} {response.reason}: {response.text[:200]}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise EmbeddingError("embedding API returned invalid JSON") from exc
        return pool_embedding(payload)


class EmbeddingCache:
    """Per-batch memo of skill embeddings.

    Concurrent lookups of the same (case-insensitive) phrase share one
    in-flight request. A lookup exceeding ``timeout`` raises
    :class:`asyncio.TimeoutError` and is not memoised.
    """

    def __init__(self, provider: EmbeddingProvider, timeout: Optional[float] = None) -> None:
        self.provider = provider
        self.timeout = timeout
        self._tasks: Dict[str, "asyncio.Future[Embedding]"] = {}

    def __len__(self) -> int:
        return len(self._tasks)

    async def get(self, text: str) -> Embedding:
        key = text.lower().strip()
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(text))
            self._tasks[key] = task
        try:
            return await task
        except asyncio.TimeoutError:
            if self._tasks.get(key) is task:
                del self._tasks[key]
            raise

    async def _fetch(self, text: str) -> Embedding:
        if self.timeout is None:
            return await self.provider.embed(text)
        return await asyncio.wait_for(self.provider.embed(text), self.timeout)

    def similarity_percent(self, a: Embedding, b: Embedding) -> float:
        return self.provider.similarity_percent(a, b)


def build_embedding_provider(settings: Settings) -> EmbeddingProvider:
    if not settings.embeddings_enabled:
        logger.info("Embedding service not configured; using string similarity only")
        return NullEmbeddingProvider()
    return HuggingFaceEmbeddingProvider(
        api_key=settings.hf_api_key,
        url=settings.embeddings_url,
        timeout=settings.embedding_timeout,
    )


__all__ = [
    "Embedding",
    "EmbeddingCache",
    "EmbeddingProvider",
    "HuggingFaceEmbeddingProvider",
    "NullEmbeddingProvider",
    "build_embedding_provider",
    "cosine_similarity",
    "pool_embedding",
    "semantic_similarity_percent",
]
