# clause_clarity/domain/models.py
# Domain models must be pure (no I/O, no external libs)
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Literal

Severity = Literal["high", "moderate", "low"]
SEVERITIES: tuple[str, ...] = ("high", "moderate", "low")


class ChunkCategory(str, Enum):
    """Origin of a chunk; the value is used as summary label (upper-cased)."""

    ORIGINAL = "original"
    SIMPLIFIED = "simplified"
    RISKY_TERMS = "risky_terms"
    GOVERNMENT_ARTICLES = "government_articles"

    @property
    def label(self) -> str:
        return self.value.upper()


@dataclass(frozen=True)
class Chunk:
    """
    Immutable retrievable fragment of a clause or of its analysis.

    - text:            visible chunk text (never empty)
    - source_index:    0-based position among chunks of the same category
    - source_name:     origin, e.g. "original_clause", "risky_term_<term>"
    - category:        ChunkCategory
    - relevance_score: set only on retrieval results; meaningful within one query
    """

    text: str
    source_index: int
    source_name: str
    category: ChunkCategory
    relevance_score: float | None = None

    def __post_init__(self) -> None:
        if not self.text or not self.text.strip():
            raise ValueError("Chunk text must not be empty")


@dataclass(frozen=True)
class RiskyTerm:
    term: str
    severity: Severity
    explanation: str


@dataclass(frozen=True)
class LegalReference:
    title: str
    url: str
    relevance: str


@dataclass(frozen=True)
class AnalysisFacets:
    """The three independent outputs of analyzing one clause."""

    explanation: str = ""
    risky_terms: tuple[RiskyTerm, ...] = field(default_factory=tuple)
    legal_references: tuple[LegalReference, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "explanation": self.explanation,
            "risky_terms": [asdict(t) for t in self.risky_terms],
            "legal_references": [asdict(r) for r in self.legal_references],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnalysisFacets:
        return cls(
            explanation=str(data.get("explanation", "")),
            risky_terms=tuple(RiskyTerm(**t) for t in data.get("risky_terms", [])),
            legal_references=tuple(
                LegalReference(**r) for r in data.get("legal_references", [])
            ),
        )


@dataclass(frozen=True)
class StrategyConfig:
    """Toggles read before every orchestration decision. Defaults favour the richest path."""

    use_advanced_orchestration: bool = True
    enable_batch_processing: bool = True
    enable_advanced_prompts: bool = True
    enable_semantic_retrieval: bool = True
