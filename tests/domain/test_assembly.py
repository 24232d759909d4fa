from clause_clarity.domain.models import (
    AnalysisFacets,
    ChunkCategory,
    LegalReference,
    RiskyTerm,
)
from clause_clarity.domain.services.assembly import (
    assemble_chunks,
    describe_legal_reference,
    describe_risky_term,
)
from clause_clarity.domain.services.chunking import Chunker, ChunkingParams

FACETS = AnalysisFacets(
    explanation="You must pay for any harm caused by your use of the software.",
    risky_terms=(
        RiskyTerm("indemnify", "high", "You cover all of the other side's losses."),
        RiskyTerm("hold harmless", "moderate", "You cannot sue the licensor."),
    ),
    legal_references=(
        LegalReference(
            "Indian Contract Act, 1872 - Section 124",
            "https://indiankanoon.org/doc/1",
            "Defines contracts of indemnity.",
        ),
    ),
)


def test_descriptions_use_fixed_sentence_shapes():
    term = FACETS.risky_terms[0]
    ref = FACETS.legal_references[0]

    assert describe_risky_term(term) == (
        'Risky Term: "indemnify" (high severity) - You cover all of the other side\'s losses.'
    )
    assert describe_legal_reference(ref) == (
        'Legal Article: "Indian Contract Act, 1872 - Section 124" - Defines contracts of indemnity.'
    )


def test_chunk_order_and_source_names():
    chunks = assemble_chunks("The Licensee shall indemnify the Licensor.", FACETS, Chunker())

    assert [c.category for c in chunks] == [
        ChunkCategory.ORIGINAL,
        ChunkCategory.SIMPLIFIED,
        ChunkCategory.RISKY_TERMS,
        ChunkCategory.RISKY_TERMS,
        ChunkCategory.GOVERNMENT_ARTICLES,
    ]
    assert [c.source_name for c in chunks] == [
        "original_clause",
        "simplified_explanation",
        "risky_term_indemnify",
        "risky_term_hold harmless",
        "gov_article_0",
    ]
    assert [c.source_index for c in chunks] == [0, 0, 0, 1, 0]
    assert all(c.relevance_score is None for c in chunks)


def test_risky_terms_are_never_split():
    long_explanation = "This wording is very broad. " * 20
    facets = AnalysisFacets(risky_terms=(RiskyTerm("forfeit", "low", long_explanation),))
    chunker = Chunker(ChunkingParams(max_chunk_size=50, overlap=10))

    chunks = assemble_chunks("Deposits are forfeited on late payment.", facets, chunker)
    risky = [c for c in chunks if c.category is ChunkCategory.RISKY_TERMS]

    assert len(risky) == 1
    assert len(risky[0].text) > 50


def test_long_clause_is_split_and_indexed():
    clause = "Either party may terminate this Agreement with notice. " * 10
    chunker = Chunker(ChunkingParams(max_chunk_size=100, overlap=20))

    chunks = assemble_chunks(clause, AnalysisFacets(), chunker)

    assert len(chunks) > 1
    assert all(c.category is ChunkCategory.ORIGINAL for c in chunks)
    assert [c.source_index for c in chunks] == list(range(len(chunks)))


def test_blank_explanation_contributes_no_chunk():
    chunks = assemble_chunks("Rent is due monthly.", AnalysisFacets(explanation="   "), Chunker())

    assert [c.category for c in chunks] == [ChunkCategory.ORIGINAL]
