"""Tests for the embedding provider, pooling and per-batch cache."""

from __future__ import annotations

import asyncio

import pytest
import requests

from jobsync.config import Settings
from jobsync.embeddings import (
    EmbeddingCache,
    HuggingFaceEmbeddingProvider,
    NullEmbeddingProvider,
    build_embedding_provider,
    cosine_similarity,
    pool_embedding,
    semantic_similarity_percent,
)
from jobsync.errors import EmbeddingError


class _StubResponse:
    def __init__(self, payload=None, status_code=200, reason="OK", text="") -> None:
        self._payload = payload
        self.status_code = status_code
        self.reason = reason
        self.text = text

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        return self._payload


class _StubSession:
    def __init__(self, response=None, error=None) -> None:
        self.response = response
        self.error = error
        self.requests = []

    def post(self, url, headers=None, json=None, timeout=None):
        self.requests.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


def test_cosine_similarity() -> None:
    assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0)
    assert cosine_similarity([1, 2], [2, 4]) == pytest.approx(1)
    assert cosine_similarity([], [1]) == 0
    assert cosine_similarity([1, 2], [1, 2, 3]) == 0
    assert cosine_similarity([0, 0], [1, 1]) == 0


def test_semantic_similarity_percent_maps_cosine_range() -> None:
    assert semantic_similarity_percent([1, 0], [1, 0]) == pytest.approx(100)
    assert semantic_similarity_percent([1, 0], [0, 1]) == pytest.approx(50)
    assert semantic_similarity_percent([1, 0], [-1, 0]) == pytest.approx(0)


def test_pool_embedding_shapes() -> None:
    assert pool_embedding([0.1, 0.2]) == pytest.approx([0.1, 0.2])
    assert pool_embedding([[1, 2]]) == pytest.approx([1, 2])
    assert pool_embedding([[1, 2], [3, 4]]) == pytest.approx([2, 3])


@pytest.mark.parametrize("payload", [[], [[]], [[[1.0]]], "not a vector", {"error": "loading"}])
def test_pool_embedding_rejects_unexpected_payloads(payload) -> None:
    with pytest.raises(EmbeddingError):
        pool_embedding(payload)


@pytest.mark.asyncio
async def test_null_provider_returns_empty_vectors() -> None:
    assert await NullEmbeddingProvider().embed("Python") == []


@pytest.mark.asyncio
async def test_huggingface_provider_without_key_skips_requests() -> None:
    session = _StubSession(_StubResponse([[1.0, 2.0]]))
    provider = HuggingFaceEmbeddingProvider(api_key=None, session=session)

    assert await provider.embed("Python") == []
    assert await provider.embed("SQL") == []
    assert session.requests == []


@pytest.mark.asyncio
async def test_huggingface_provider_posts_inputs_and_pools() -> None:
    session = _StubSession(_StubResponse([[1.0, 2.0], [3.0, 4.0]]))
    provider = HuggingFaceEmbeddingProvider(
        api_key="hf_test", url="https://example.test/embed", timeout=3.0, session=session
    )

    vector = await provider.embed("Python")

    assert vector == pytest.approx([2.0, 3.0])
    request = session.requests[0]
    assert request["url"] == "https://example.test/embed"
    assert request["json"] == {"inputs": ["Python"]}
    assert request["headers"]["Authorization"] == "Bearer hf_test"
    assert request["timeout"] == 3.0


@pytest.mark.asyncio
async def test_huggingface_provider_returns_empty_on_http_error() -> None:
    session = _StubSession(_StubResponse(status_code=503, reason="Service Unavailable", text="loading"))
    provider = HuggingFaceEmbeddingProvider(api_key="hf_test", session=session)

    assert await provider.embed("Python") == []


@pytest.mark.asyncio
async def test_huggingface_provider_returns_empty_on_network_error() -> None:
    session = _StubSession(error=requests.ConnectionError("connection refused"))
    provider = HuggingFaceEmbeddingProvider(api_key="hf_test", session=session)

    assert await provider.embed("Python") == []


@pytest.mark.asyncio
async def test_cache_shares_in_flight_lookups(make_provider) -> None:
    provider = make_provider({"python": [1.0, 0.0]}, delay=0.01)
    cache = EmbeddingCache(provider)

    vectors = await asyncio.gather(cache.get("Python"), cache.get(" python "), cache.get("PYTHON"))

    assert vectors == [[1.0, 0.0]] * 3
    assert len(provider.calls) == 1
    assert len(cache) == 1


@pytest.mark.asyncio
async def test_cache_does_not_memoise_timeouts(make_provider) -> None:
    provider = make_provider({"python": [1.0, 0.0]}, delay=0.5)
    cache = EmbeddingCache(provider, timeout=0.01)

    with pytest.raises(asyncio.TimeoutError):
        await cache.get("Python")

    assert len(cache) == 0


def test_build_embedding_provider_follows_settings() -> None:
    assert isinstance(build_embedding_provider(Settings()), NullEmbeddingProvider)

    provider = build_embedding_provider(
        Settings(hf_api_key="hf_test", embeddings_url="https://example.test/embed", embedding_timeout=2)
    )
    assert isinstance(provider, HuggingFaceEmbeddingProvider)
    assert provider.url == "https://example.test/embed"
    assert provider.timeout == 2
