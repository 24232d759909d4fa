from typing import Protocol, runtime_checkable

from clause_clarity.domain.models import AnalysisFacets


@runtime_checkable
class HistoryPort(Protocol):
    """Best-effort persistence of a finished analysis."""

    async def save(self, clause: str, facets: AnalysisFacets) -> None: ...
