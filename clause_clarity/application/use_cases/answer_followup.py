# clause_clarity/application/use_cases/answer_followup.py
"""Follow-up answering: picks semantic, full-context or legacy prompting per config.

Semantic path:
1. Assemble chunks from clause + facets
2. Reuse or build the index entry for their fingerprint
3. Retrieve the most relevant chunks (fallback never raises)
4. Answer from the retrieved context only, with ContextMetrics attached
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence

from clause_clarity.application.dto.followup_dto import ContextMetrics, FollowupAnswer
from clause_clarity.application.dto.retrieval_dto import RetrievalOptions, RetrievalResult
from clause_clarity.application.ports.embedding_port import EmbeddingPort
from clause_clarity.application.ports.llm_port import (
    DEFAULT_GENERATION,
    GenerationParams,
    ModelPort,
)
from clause_clarity.application.ports.telemetry_port import NullTelemetry, TelemetryPort
from clause_clarity.application.prompts import (
    FULL_CONTEXT_FOLLOWUP,
    LEGACY_FOLLOWUP,
    SEMANTIC_FOLLOWUP,
)
from clause_clarity.application.services.embedding_index import EmbeddingIndexCache
from clause_clarity.application.services.provider_calls import with_timeout
from clause_clarity.application.services.retriever import Retriever
from clause_clarity.application.use_cases.analyze_clause import AnalyzeClause
from clause_clarity.domain.errors import ModelProviderError, ProviderError, ValidationError
from clause_clarity.domain.models import AnalysisFacets, StrategyConfig
from clause_clarity.domain.services.assembly import assemble_chunks
from clause_clarity.domain.services.chunking import Chunker
from clause_clarity.domain.services.strategy import (
    AnsweringStrategy,
    ensure_batch_allowed,
    select_strategy,
)

logger = logging.getLogger(__name__)

FOLLOWUP_RETRIEVAL = RetrievalOptions(max_results=3, relevance_threshold=0.6)


def estimate_tokens_saved(clause: str, facets: AnalysisFacets, summary: str) -> int:
    """Characters of full context that were not sent (rough token proxy)."""
    facets_json = json.dumps(facets.to_dict(), ensure_ascii=False)
    return max(0, len(clause) + len(facets_json) - len(summary))


class AnswerFollowup:
    def __init__(
        self,
        model: ModelPort,
        embedding: EmbeddingPort,
        index_cache: EmbeddingIndexCache,
        analyzer: AnalyzeClause,
        chunker: Chunker | None = None,
        retriever: Retriever | None = None,
        telemetry: TelemetryPort | None = None,
        generation: GenerationParams = DEFAULT_GENERATION,
        timeout_s: float | None = None,
        retrieval: RetrievalOptions = FOLLOWUP_RETRIEVAL,
    ) -> None:
        self.model = model
        self.embedding = embedding
        self.index_cache = index_cache
        self.analyzer = analyzer
        self.chunker = chunker or Chunker()
        self.telemetry = telemetry or NullTelemetry()
        self.retriever = retriever or Retriever(self.telemetry)
        self.generation = generation
        self.timeout_s = timeout_s
        self.retrieval = retrieval

    async def answer(
        self,
        question: str,
        clause: str,
        facets: AnalysisFacets | None = None,
        config: StrategyConfig | None = None,
    ) -> FollowupAnswer:
        if not question or not question.strip():
            raise ValidationError("question must not be empty")
        if not clause or not clause.strip():
            raise ValidationError("clause must not be empty")
        cfg = config or StrategyConfig()
        self.analyzer.require_credentials()

        strategy = select_strategy(cfg, has_facets=facets is not None)
        logger.info("Answering follow-up with %s strategy", strategy.value)
        if strategy is AnsweringStrategy.SEMANTIC:
            if facets is None:  # pragma: no cover - defensive guard
                raise ValidationError("semantic answering requires analysis facets")
            result = await self._semantic(question, clause, facets)
        else:
            template = (
                FULL_CONTEXT_FOLLOWUP
                if strategy is AnsweringStrategy.FULL_CONTEXT
                else LEGACY_FOLLOWUP
            )
            text = await self._complete(template.format(clause=clause, question=question))
            result = FollowupAnswer(answer=text.strip(), strategy=strategy)

        self.telemetry.incr("followup.answered", {"strategy": strategy.value})
        return result

    async def _semantic(
        self, question: str, clause: str, facets: AnalysisFacets
    ) -> FollowupAnswer:
        chunks = assemble_chunks(clause, facets, self.chunker)
        key = self.index_cache.fingerprint_for(clause, facets)
        index = await self.index_cache.get_or_build(key, chunks, self.embedding)

        retrieved: RetrievalResult = await self.retriever.retrieve(question, index, self.retrieval)
        text = await self._complete(
            SEMANTIC_FOLLOWUP.format(context=retrieved.summary, question=question)
        )
        metrics = ContextMetrics(
            chunks_used=len(retrieved.chunks),
            total_chunks=retrieved.total_available,
            average_relevance=retrieved.average_relevance,
            tokens_saved=estimate_tokens_saved(clause, facets, retrieved.summary),
            fallback_used=retrieved.fallback_used,
        )
        return FollowupAnswer(
            answer=text.strip(),
            strategy=AnsweringStrategy.SEMANTIC,
            relevant_context=retrieved.summary,
            metrics=metrics,
        )

    async def _complete(self, prompt: str) -> str:
        try:
            return await with_timeout(
                self.model.complete(prompt, self.generation),
                self.timeout_s,
                ModelProviderError,
                "model call",
            )
        except ProviderError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise ModelProviderError(f"model call failed: {ex}") from ex

    async def process_batch(
        self, clauses: Sequence[str], config: StrategyConfig | None = None
    ) -> list[AnalysisFacets]:
        cfg = config or StrategyConfig()
        ensure_batch_allowed(cfg)
        return await self.analyzer.analyze_batch(clauses, cfg)
