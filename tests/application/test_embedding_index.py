"""Tests for EmbeddingIndex and its bounded, single-flight cache."""

import asyncio
from collections.abc import Sequence

import pytest

from clause_clarity.application.services.embedding_index import (
    EmbeddingIndex,
    EmbeddingIndexCache,
)
from clause_clarity.domain.errors import EmbeddingProviderError
from clause_clarity.domain.models import AnalysisFacets, Chunk, ChunkCategory

KEYWORDS = ("terminat", "payment", "liabilit")


def keyword_vector(text: str) -> list[float]:
    low = text.lower()
    return [1.0 if kw in low else 0.0 for kw in KEYWORDS] + [0.1]


class FakeEmbedding:
    """Keyword-axis embeddings with call counters."""

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.text_calls = 0
        self.query_calls = 0

    async def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        self.text_calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return [keyword_vector(t) for t in texts]

    async def embed_query(self, text: str) -> list[float]:
        self.query_calls += 1
        return keyword_vector(text)


class BrokenEmbedding(FakeEmbedding):
    def __init__(self, vectors=None, exc: Exception | None = None) -> None:
        super().__init__()
        self.vectors = vectors
        self.exc = exc

    async def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        self.text_calls += 1
        if self.exc is not None:
            raise self.exc
        return self.vectors


def make_chunks() -> list[Chunk]:
    texts = [
        "Either party may terminate with notice.",
        "Payment is due within 30 days.",
        "Liability is capped at fees paid.",
    ]
    return [Chunk(t, i, "original_clause", ChunkCategory.ORIGINAL) for i, t in enumerate(texts)]


class CountingTelemetry:
    def __init__(self) -> None:
        self.counts: dict[str, int] = {}

    def incr(self, name, tags=None):  # type: ignore[no-untyped-def]
        self.counts[name] = self.counts.get(name, 0) + 1

    def observe(self, name, value, tags=None):  # type: ignore[no-untyped-def]
        pass


# ---------- EmbeddingIndex ----------


def test_build_and_query_ranks_by_cosine():
    emb = FakeEmbedding()
    index = asyncio.run(EmbeddingIndex.build(make_chunks(), emb))

    results = asyncio.run(index.query("When can I terminate?", k=3))

    assert emb.text_calls == 1
    assert emb.query_calls == 1
    assert results[0][0].text.startswith("Either party may terminate")
    assert results[0][1] == pytest.approx(1.0)
    assert [s for _, s in results] == sorted((s for _, s in results), reverse=True)


def test_query_respects_k():
    index = asyncio.run(EmbeddingIndex.build(make_chunks(), FakeEmbedding()))
    assert len(asyncio.run(index.query("payment", k=2))) == 2
    assert asyncio.run(index.query("payment", k=0)) == []


def test_build_rejects_malformed_vectors():
    emb = BrokenEmbedding(vectors=[[0.1, 0.2], [0.3]])  # wrong count and ragged
    with pytest.raises(EmbeddingProviderError):
        asyncio.run(EmbeddingIndex.build(make_chunks(), emb))


def test_build_wraps_unexpected_provider_exceptions():
    emb = BrokenEmbedding(exc=RuntimeError("socket closed"))
    with pytest.raises(EmbeddingProviderError, match="socket closed"):
        asyncio.run(EmbeddingIndex.build(make_chunks(), emb))


def test_build_timeout_is_provider_error():
    emb = FakeEmbedding(delay=0.2)
    with pytest.raises(EmbeddingProviderError) as exc_info:
        asyncio.run(EmbeddingIndex.build(make_chunks(), emb, timeout_s=0.01))
    assert exc_info.value.status == 504


def test_query_rejects_dimension_mismatch():
    class ShortQuery(FakeEmbedding):
        async def embed_query(self, text: str) -> list[float]:
            return [1.0]

    index = asyncio.run(EmbeddingIndex.build(make_chunks(), ShortQuery()))
    with pytest.raises(EmbeddingProviderError):
        asyncio.run(index.query("payment", k=1))


# ---------- EmbeddingIndexCache ----------


def test_cache_reuses_index_for_same_fingerprint():
    emb = FakeEmbedding()
    telemetry = CountingTelemetry()
    cache = EmbeddingIndexCache(telemetry=telemetry)
    key = cache.fingerprint_for("clause", AnalysisFacets())

    async def run():
        first = await cache.get_or_build(key, make_chunks(), emb)
        second = await cache.get_or_build(key, make_chunks(), emb)
        return first, second

    first, second = asyncio.run(run())

    assert first is second
    assert emb.text_calls == 1
    assert telemetry.counts == {"index.cache.miss": 1, "index.cache.hit": 1}


def test_distinct_fingerprints_get_distinct_indexes():
    emb = FakeEmbedding()
    cache = EmbeddingIndexCache()

    async def run():
        a = await cache.get_or_build("a", make_chunks(), emb)
        b = await cache.get_or_build("b", make_chunks(), emb)
        return a, b

    a, b = asyncio.run(run())

    assert a is not b
    assert emb.text_calls == 2
    assert len(cache) == 2


def test_cache_evicts_oldest_inserted_beyond_capacity():
    emb = FakeEmbedding()
    telemetry = CountingTelemetry()
    cache = EmbeddingIndexCache(telemetry=telemetry)

    async def run():
        for i in range(11):
            await cache.get_or_build(f"k{i}", make_chunks(), emb)

    asyncio.run(run())

    assert len(cache) == 10
    assert "k0" not in cache
    assert "k10" in cache
    assert telemetry.counts["index.cache.evicted"] == 1


def test_cache_hit_does_not_refresh_position():
    emb = FakeEmbedding()
    cache = EmbeddingIndexCache(capacity=3)

    async def run():
        for key in ("a", "b", "c"):
            await cache.get_or_build(key, make_chunks(), emb)
        await cache.get_or_build("a", make_chunks(), emb)  # hit
        await cache.get_or_build("d", make_chunks(), emb)

    asyncio.run(run())

    assert "a" not in cache
    assert cache.stats()["keys"] == ["b", "c", "d"]


def test_concurrent_builds_of_same_key_are_single_flight():
    emb = FakeEmbedding(delay=0.05)
    telemetry = CountingTelemetry()
    cache = EmbeddingIndexCache(telemetry=telemetry)

    async def run():
        return await asyncio.gather(
            *(cache.get_or_build("same", make_chunks(), emb) for _ in range(5))
        )

    results = asyncio.run(run())

    assert emb.text_calls == 1
    assert all(r is results[0] for r in results)
    assert telemetry.counts["index.cache.joined"] == 4


def test_cancelled_first_caller_does_not_break_joined_callers():
    emb = FakeEmbedding(delay=0.05)
    cache = EmbeddingIndexCache()

    async def run():
        first = asyncio.create_task(cache.get_or_build("k", make_chunks(), emb))
        second = asyncio.create_task(cache.get_or_build("k", make_chunks(), emb))
        await asyncio.sleep(0.01)
        first.cancel()
        outcomes = await asyncio.gather(first, second, return_exceptions=True)
        return outcomes

    first_outcome, second_outcome = asyncio.run(run())

    assert isinstance(first_outcome, asyncio.CancelledError)
    assert isinstance(second_outcome, EmbeddingIndex)
    assert len(second_outcome.chunks) == 3
    assert emb.text_calls == 1
    assert "k" in cache


def test_failed_build_is_not_cached_and_waiters_see_the_error():
    class FlakyEmbedding(FakeEmbedding):
        async def embed_texts(self, texts):  # type: ignore[no-untyped-def]
            self.text_calls += 1
            await asyncio.sleep(0.02)
            if self.text_calls == 1:
                raise EmbeddingProviderError("quota", status=429)
            return [keyword_vector(t) for t in texts]

    emb = FlakyEmbedding()
    cache = EmbeddingIndexCache()

    async def run():
        return await asyncio.gather(
            cache.get_or_build("k", make_chunks(), emb),
            cache.get_or_build("k", make_chunks(), emb),
            return_exceptions=True,
        )

    outcomes = asyncio.run(run())

    assert all(isinstance(o, EmbeddingProviderError) for o in outcomes)
    assert "k" not in cache

    index = asyncio.run(cache.get_or_build("k", make_chunks(), emb))
    assert emb.text_calls == 2
    assert "k" in cache
    assert len(index.chunks) == 3


def test_clear_and_stats():
    cache = EmbeddingIndexCache(capacity=4)
    asyncio.run(cache.get_or_build("x", make_chunks(), FakeEmbedding()))

    assert cache.stats() == {"size": 1, "capacity": 4, "keys": ["x"]}
    cache.clear()
    assert len(cache) == 0


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        EmbeddingIndexCache(capacity=0)
