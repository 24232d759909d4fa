"""Cache key for a (clause, facets) pair."""

from __future__ import annotations

import hashlib
import json

from clause_clarity.domain.models import AnalysisFacets


def _digest(payload: str) -> str:
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def fingerprint(clause: str, facets: AnalysisFacets) -> str:
    """Deterministic key: digest of the clause + digest of the canonical facets JSON.

    The whole clause and the whole facets payload are hashed, so two clauses that
    share a prefix never collide.
    """
    facets_json = json.dumps(facets.to_dict(), sort_keys=True, ensure_ascii=False)
    return f"{_digest(clause)[:32]}_{_digest(facets_json)[:16]}"
