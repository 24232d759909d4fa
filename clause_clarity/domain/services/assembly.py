# clause_clarity/domain/services/assembly.py
# Pure domain service: clause + analysis facets -> tagged chunk set.
from __future__ import annotations

from clause_clarity.domain.models import (
    AnalysisFacets,
    Chunk,
    ChunkCategory,
    LegalReference,
    RiskyTerm,
)
from clause_clarity.domain.services.chunking import Chunker


def describe_risky_term(term: RiskyTerm) -> str:
    return f'Risky Term: "{term.term}" ({term.severity} severity) - {term.explanation}'


def describe_legal_reference(ref: LegalReference) -> str:
    return f'Legal Article: "{ref.title}" - {ref.relevance}'


def _split(text: str, chunker: Chunker, source: str, category: ChunkCategory) -> list[Chunk]:
    return [
        Chunk(text=piece, source_index=i, source_name=source, category=category)
        for i, piece in enumerate(chunker.split(text))
    ]


def assemble_chunks(clause: str, facets: AnalysisFacets, chunker: Chunker) -> list[Chunk]:
    """Build the full chunk set for one (clause, facets) pair.

    Order: original clause, simplified explanation, risky terms, legal references.
    Risky terms and legal references are never split: each item becomes exactly
    one descriptive chunk so it stays retrievable as an atomic unit.
    """
    chunks = _split(clause, chunker, "original_clause", ChunkCategory.ORIGINAL)
    if facets.explanation.strip():
        chunks += _split(
            facets.explanation, chunker, "simplified_explanation", ChunkCategory.SIMPLIFIED
        )
    chunks += [
        Chunk(
            text=describe_risky_term(term),
            source_index=i,
            source_name=f"risky_term_{term.term}",
            category=ChunkCategory.RISKY_TERMS,
        )
        for i, term in enumerate(facets.risky_terms)
    ]
    chunks += [
        Chunk(
            text=describe_legal_reference(ref),
            source_index=i,
            source_name=f"gov_article_{i}",
            category=ChunkCategory.GOVERNMENT_ARTICLES,
        )
        for i, ref in enumerate(facets.legal_references)
    ]
    return chunks
