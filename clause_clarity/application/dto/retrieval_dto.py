from __future__ import annotations

from dataclasses import dataclass, field

from clause_clarity.domain.errors import ConfigurationError
from clause_clarity.domain.models import Chunk


@dataclass(frozen=True)
class RetrievalOptions:
    """
    - max_results:          chunks returned at most
    - relevance_threshold:  minimum score for a chunk to be kept
    - include_labels:       prefix summary entries with the upper-cased category
    """

    max_results: int = 3
    relevance_threshold: float = 0.7
    include_labels: bool = True

    def __post_init__(self) -> None:
        if self.max_results <= 0:
            raise ConfigurationError("max_results must be > 0")


@dataclass(frozen=True)
class RetrievalResult:
    chunks: list[Chunk] = field(default_factory=list)
    summary: str = ""
    total_available: int = 0
    average_relevance: float = 0.0
    fallback_used: bool = False
