from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from clause_clarity.application.ports.history_port import HistoryPort
from clause_clarity.domain.models import AnalysisFacets


@dataclass
class JsonlHistoryStore(HistoryPort):
    """Appends one JSON object per finished analysis to a local file."""

    path: str

    async def save(self, clause: str, facets: AnalysisFacets) -> None:
        record = {
            "timestamp": datetime.now(UTC).isoformat(),
            "clause": clause,
            **facets.to_dict(),
        }
        await asyncio.to_thread(self._append, record)

    def _append(self, record: dict[str, Any]) -> None:
        target = Path(self.path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(record, ensure_ascii=False) + "\n")

    def read_all(self) -> list[dict[str, Any]]:
        target = Path(self.path)
        if not target.exists():
            return []
        with target.open(encoding="utf-8") as fh:
            return [json.loads(line) for line in fh if line.strip()]
