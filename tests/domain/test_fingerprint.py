from clause_clarity.domain.models import AnalysisFacets, RiskyTerm
from clause_clarity.domain.services.fingerprint import fingerprint


def test_fingerprint_is_deterministic():
    facets = AnalysisFacets(explanation="x")
    assert fingerprint("clause", facets) == fingerprint("clause", AnalysisFacets(explanation="x"))


def test_shared_prefix_does_not_collide():
    prefix = "The Tenant shall pay rent monthly. " * 5
    a = fingerprint(prefix + "Late fees apply.", AnalysisFacets())
    b = fingerprint(prefix + "No late fees apply.", AnalysisFacets())
    assert a != b


def test_facets_change_the_key():
    base = AnalysisFacets(explanation="x")
    other = AnalysisFacets(explanation="x", risky_terms=(RiskyTerm("fee", "low", "small"),))
    assert fingerprint("clause", base) != fingerprint("clause", other)
