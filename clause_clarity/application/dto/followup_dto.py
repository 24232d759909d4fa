# clause_clarity/application/dto/followup_dto.py
from __future__ import annotations

from dataclasses import dataclass

from clause_clarity.domain.services.strategy import AnsweringStrategy


@dataclass(frozen=True)
class ContextMetrics:
    """
    Metrics attached to a semantically answered follow-up.

    - chunks_used:       chunks that made it into the prompt
    - total_chunks:      chunks available in the index entry
    - average_relevance: mean score of the used chunks (0.0 on fallback)
    - tokens_saved:      character-count estimate of context not sent
    - fallback_used:     True when retrieval degraded to the first chunks
    """

    chunks_used: int
    total_chunks: int
    average_relevance: float
    tokens_saved: int
    fallback_used: bool = False


@dataclass(frozen=True)
class FollowupAnswer:
    """Answer plus the strategy that produced it; metrics only on the semantic path."""

    answer: str
    strategy: AnsweringStrategy
    relevant_context: str | None = None
    metrics: ContextMetrics | None = None
