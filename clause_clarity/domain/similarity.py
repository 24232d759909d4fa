"""Pure similarity functions for the in-memory semantic index.

Why: Scoring is a pure function → belongs in the domain.
"""

from collections.abc import Sequence
from math import isfinite, sqrt

from .types import Score, Vector


def cosine(u: Sequence[float], v: Sequence[float]) -> Score:
    """Compute cosine similarity between two vectors.

    Args:
        u: First vector
        v: Second vector

    Returns:
        Cosine similarity score between -1 and 1 (0.0 for zero vectors)
    """
    dot = sum(a * b for a, b in zip(u, v, strict=False))
    nu = sqrt(sum(a * a for a in u)) or 1.0
    nv = sqrt(sum(b * b for b in v)) or 1.0
    return dot / (nu * nv)


def is_well_formed(vectors: Sequence[Sequence[float]], expected: int) -> bool:
    """True when there are `expected` non-empty, equal-length, finite numeric vectors."""
    if not isinstance(vectors, list | tuple) or len(vectors) != expected:
        return False
    dims = set()
    for vec in vectors:
        if not isinstance(vec, Sequence) or isinstance(vec, str) or not vec:
            return False
        for x in vec:
            if isinstance(x, bool) or not isinstance(x, int | float) or not isfinite(x):
                return False
        dims.add(len(vec))
    return len(dims) <= 1


def as_vector(values: Sequence[float]) -> Vector:
    return tuple(float(x) for x in values)
