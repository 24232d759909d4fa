"""In-memory semantic index over a chunk set, plus its bounded cache.

Indexes live for the process lifetime only. The cache holds no module
globals; each instance is independent.
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from collections.abc import Sequence
from dataclasses import dataclass

from clause_clarity.application.ports.embedding_port import EmbeddingPort
from clause_clarity.application.ports.telemetry_port import NullTelemetry, TelemetryPort
from clause_clarity.application.services.provider_calls import with_timeout
from clause_clarity.domain.errors import EmbeddingProviderError, ProviderError
from clause_clarity.domain.models import AnalysisFacets, Chunk
from clause_clarity.domain.services.fingerprint import fingerprint
from clause_clarity.domain.similarity import as_vector, cosine, is_well_formed
from clause_clarity.domain.types import Vector

logger = logging.getLogger(__name__)

DEFAULT_CACHE_CAPACITY = 10


@dataclass(frozen=True)
class EmbeddingIndex:
    """One index entry: chunk set, its vectors and the provider that embedded them."""

    chunks: tuple[Chunk, ...]
    vectors: tuple[Vector, ...]
    embedding: EmbeddingPort
    timeout_s: float | None = None

    @property
    def dim(self) -> int:
        return len(self.vectors[0]) if self.vectors else 0

    @classmethod
    async def build(
        cls,
        chunks: Sequence[Chunk],
        embedding: EmbeddingPort,
        timeout_s: float | None = None,
    ) -> EmbeddingIndex:
        """Embed every chunk; all-or-nothing.

        Raises:
            EmbeddingProviderError: provider unreachable or vectors malformed
        """
        if not chunks:
            return cls(chunks=(), vectors=(), embedding=embedding, timeout_s=timeout_s)
        texts = [c.text for c in chunks]
        try:
            raw = await with_timeout(
                embedding.embed_texts(texts), timeout_s, EmbeddingProviderError, "embedding"
            )
        except ProviderError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingProviderError(f"embedding failed: {ex}") from ex
        if not is_well_formed(raw, expected=len(chunks)):
            raise EmbeddingProviderError(
                f"embedding provider returned malformed vectors for {len(chunks)} chunks"
            )
        return cls(
            chunks=tuple(chunks),
            vectors=tuple(as_vector(v) for v in raw),
            embedding=embedding,
            timeout_s=timeout_s,
        )

    async def query(self, question: str, k: int) -> list[tuple[Chunk, float]]:
        """Up to k (chunk, cosine score) pairs, most relevant first."""
        if k <= 0 or not self.chunks:
            return []
        try:
            raw = await with_timeout(
                self.embedding.embed_query(question),
                self.timeout_s,
                EmbeddingProviderError,
                "query embedding",
            )
        except ProviderError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingProviderError(f"query embedding failed: {ex}") from ex
        if not is_well_formed([raw], expected=1) or len(raw) != self.dim:
            raise EmbeddingProviderError("embedding provider returned a malformed query vector")
        q = as_vector(raw)
        scored = [(chunk, cosine(q, vec)) for chunk, vec in zip(self.chunks, self.vectors)]
        scored.sort(key=lambda pair: pair[1], reverse=True)
        return scored[:k]


class EmbeddingIndexCache:
    """Fingerprint → EmbeddingIndex, bounded, evicting the oldest-inserted entry.

    A cache hit does not refresh an entry's position. Concurrent builds of the
    same missing key are single-flight: the first caller starts a build task
    owned by the cache and every caller awaits it through asyncio.shield, so a
    cancelled caller leaves the build running for the others. Bookkeeping
    happens between awaits on one event loop, so no lock is needed.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CACHE_CAPACITY,
        telemetry: TelemetryPort | None = None,
        timeout_s: float | None = None,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self.capacity = capacity
        self.telemetry = telemetry or NullTelemetry()
        self.timeout_s = timeout_s
        self._entries: OrderedDict[str, EmbeddingIndex] = OrderedDict()
        self._inflight: dict[str, asyncio.Future[EmbeddingIndex]] = {}

    @staticmethod
    def fingerprint_for(clause: str, facets: AnalysisFacets) -> str:
        return fingerprint(clause, facets)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    async def get_or_build(
        self,
        key: str,
        chunks: Sequence[Chunk],
        embedding: EmbeddingPort,
    ) -> EmbeddingIndex:
        cached = self._entries.get(key)
        if cached is not None:
            logger.debug("Index cache hit for %s", key)
            self.telemetry.incr("index.cache.hit")
            return cached

        build = self._inflight.get(key)
        if build is None:
            self.telemetry.incr("index.cache.miss")
            # owned by the cache: cancelling one caller never cancels the shared build
            build = asyncio.ensure_future(
                EmbeddingIndex.build(chunks, embedding, timeout_s=self.timeout_s)
            )
            self._inflight[key] = build
            build.add_done_callback(lambda done, key=key: self._settle(key, done))
        else:
            logger.debug("Joining in-flight index build for %s", key)
            self.telemetry.incr("index.cache.joined")
        return await asyncio.shield(build)

    def _settle(self, key: str, build: asyncio.Future[EmbeddingIndex]) -> None:
        self._inflight.pop(key, None)
        if build.cancelled():
            return
        if build.exception() is not None:
            logger.warning("Index build for %s failed: %s", key, build.exception())
            return
        index = build.result()
        self._insert(key, index)
        logger.info("Built index %s with %d chunks", key, len(index.chunks))

    def _insert(self, key: str, index: EmbeddingIndex) -> None:
        self._entries[key] = index
        while len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted index %s", evicted)
            self.telemetry.incr("index.cache.evicted")

    def clear(self) -> None:
        self._entries.clear()
        logger.info("Index cache cleared")

    def stats(self) -> dict[str, object]:
        return {"size": len(self._entries), "capacity": self.capacity, "keys": list(self._entries)}
