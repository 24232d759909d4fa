"""Pure parsing/validation of model responses for the JSON-shaped facets.

Parsing is an ordered chain of strategies that each return an optional
value; the first non-None wins. Validation drops bad items instead of failing the facet.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Iterable, Sequence
from typing import Any
from urllib.parse import urlparse

from clause_clarity.domain.errors import ParseError
from clause_clarity.domain.models import SEVERITIES, LegalReference, RiskyTerm

ParseStrategy = Callable[[str], list[Any] | None]

_FENCED_ARRAY = re.compile(r"```(?:json)?\s*(\[.*?\])\s*```", re.DOTALL | re.IGNORECASE)
_ARRAY_START = re.compile(r"\[\s*[\{\]]")


def _loads_list(text: str) -> list[Any] | None:
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return value if isinstance(value, list) else None


def parse_direct(raw: str) -> list[Any] | None:
    return _loads_list(raw.strip())


def parse_fenced_block(raw: str) -> list[Any] | None:
    for match in _FENCED_ARRAY.finditer(raw):
        value = _loads_list(match.group(1))
        if value is not None:
            return value
    return None


def _matching_bracket(raw: str, start: int) -> int | None:
    """Index of the `]` closing the `[` at `start`, skipping brackets inside strings."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(raw)):
        ch = raw[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return i
    return None


def parse_embedded_array(raw: str) -> list[Any] | None:
    """First top-level array of objects (or empty array) embedded in free text."""
    for match in _ARRAY_START.finditer(raw):
        end = _matching_bracket(raw, match.start())
        if end is None:
            continue
        value = _loads_list(raw[match.start() : end + 1])
        if value is not None:
            return value
    return None


DEFAULT_STRATEGIES: tuple[tuple[str, ParseStrategy], ...] = (
    ("direct", parse_direct),
    ("fenced_block", parse_fenced_block),
    ("embedded_array", parse_embedded_array),
)


def parse_json_array(
    raw: str | None,
    strategies: Sequence[tuple[str, ParseStrategy]] = DEFAULT_STRATEGIES,
) -> list[Any] | None:
    """Apply strategies in order; None when every strategy gave up."""
    if not raw or not raw.strip():
        return None
    for _name, strategy in strategies:
        value = strategy(raw)
        if value is not None:
            return value
    return None


def require_json_array(raw: str | None) -> list[Any]:
    """Like parse_json_array, but a total miss raises ParseError (absorbed by the caller)."""
    value = parse_json_array(raw)
    if value is None:
        preview = (raw or "").strip()[:60]
        raise ParseError(f"no JSON array found in response starting {preview!r}")
    return value

# ---------- Item validation ----------


def _text(item: dict[str, Any], key: str) -> str:
    value = item.get(key)
    if value is None:
        return ""
    return str(value).strip()


def coerce_severity(value: Any) -> str:
    norm = str(value).strip().lower() if value is not None else ""
    return norm if norm in SEVERITIES else "moderate"


def validate_risky_terms(items: Iterable[Any]) -> tuple[RiskyTerm, ...]:
    """Keep items carrying term, severity and explanation.

    A present but unrecognised severity is coerced to moderate; a missing one
    drops the item.
    """
    out: list[RiskyTerm] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        term = _text(item, "term")
        severity = _text(item, "severity")
        explanation = _text(item, "explanation")
        if not (term and severity and explanation):
            continue
        out.append(
            RiskyTerm(
                term=term,
                severity=coerce_severity(severity),  # type: ignore[arg-type]
                explanation=explanation,
            )
        )
    return tuple(out)


def is_absolute_url(value: str) -> bool:
    if not value or any(ch.isspace() for ch in value):
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


def validate_legal_references(items: Iterable[Any]) -> tuple[LegalReference, ...]:
    """Keep items with title, url and relevance whose url is a well-formed absolute URL."""
    out: list[LegalReference] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        title = _text(item, "title")
        url = _text(item, "url")
        relevance = _text(item, "relevance")
        if not (title and url and relevance) or not is_absolute_url(url):
            continue
        out.append(LegalReference(title=title, url=url, relevance=relevance))
    return tuple(out)
