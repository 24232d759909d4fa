"""Relevance-scored retrieval over an EmbeddingIndex.

A failing similarity query degrades to the leading chunks instead of
surfacing an error.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace

from clause_clarity.application.dto.retrieval_dto import RetrievalOptions, RetrievalResult
from clause_clarity.application.ports.telemetry_port import NullTelemetry, TelemetryPort
from clause_clarity.application.services.embedding_index import EmbeddingIndex
from clause_clarity.domain.errors import ProviderError
from clause_clarity.domain.models import Chunk

logger = logging.getLogger(__name__)

# Candidate headroom so threshold filtering can still fill max_results.
OVERFETCH_FACTOR = 2


def render_summary(chunks: Sequence[Chunk], include_labels: bool = True) -> str:
    """1-indexed entries, optionally prefixed with the upper-cased category label."""
    lines = []
    for i, chunk in enumerate(chunks, 1):
        prefix = f"[{chunk.category.label}] " if include_labels else ""
        lines.append(f"{i}. {prefix}{chunk.text}")
    return "\n\n".join(lines)


class Retriever:
    def __init__(self, telemetry: TelemetryPort | None = None) -> None:
        self.telemetry = telemetry or NullTelemetry()

    async def retrieve(
        self,
        question: str,
        index: EmbeddingIndex,
        options: RetrievalOptions | None = None,
    ) -> RetrievalResult:
        opts = options or RetrievalOptions()
        try:
            candidates = await index.query(question, opts.max_results * OVERFETCH_FACTOR)
        except ProviderError as ex:
            logger.warning("Semantic retrieval failed, using leading chunks instead: %s", ex)
            self.telemetry.incr("retrieval.fallback", {"status": str(ex.status)})
            return self._fallback(index, opts)

        kept = [(c, s) for c, s in candidates if s >= opts.relevance_threshold]
        kept.sort(key=lambda pair: pair[1], reverse=True)
        kept = kept[: opts.max_results]
        chunks = [replace(c, relevance_score=s) for c, s in kept]
        average = sum(s for _, s in kept) / len(kept) if kept else 0.0

        logger.debug(
            "Retrieved %d/%d chunks (avg relevance %.2f) for %r",
            len(chunks),
            len(index.chunks),
            average,
            question[:50],
        )
        self.telemetry.observe("retrieval.average_relevance", average)
        return RetrievalResult(
            chunks=chunks,
            summary=render_summary(chunks, opts.include_labels),
            total_available=len(index.chunks),
            average_relevance=average,
        )

    @staticmethod
    def _fallback(index: EmbeddingIndex, opts: RetrievalOptions) -> RetrievalResult:
        chunks = list(index.chunks[: opts.max_results])
        return RetrievalResult(
            chunks=chunks,
            summary="\n\n".join(c.text for c in chunks),
            total_available=len(index.chunks),
            average_relevance=0.0,
            fallback_used=True,
        )
