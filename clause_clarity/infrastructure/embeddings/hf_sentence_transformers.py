"""Local embeddings via sentence-transformers.

Encoding is CPU/GPU bound, so every call runs in a worker thread and the
event loop stays free for the concurrent model requests.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from clause_clarity.application.ports.embedding_port import EmbeddingPort
from clause_clarity.domain.errors import EmbeddingProviderError

# Module attribute so tests can monkeypatch a fake encoder class
SentenceTransformer: Any | None
try:  # pragma: no cover - exercised via tests with monkeypatch
    from sentence_transformers import SentenceTransformer as _SentenceTransformer
except Exception:  # noqa: BLE001
    SentenceTransformer = None
else:  # pragma: no cover - exercised in integration
    SentenceTransformer = _SentenceTransformer


@dataclass
class HFEmbeddingAdapter(EmbeddingPort):
    model_name: str = "sentence-transformers/all-MiniLM-L6-v2"
    device: str = "cpu"  # "cuda" | "mps"
    local_files_only: bool = False
    _model: Any | None = field(default=None, repr=False)
    _load_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def _loaded(self) -> Any:
        # worker threads may race on first use; load exactly once
        with self._load_lock:
            if self._model is None:
                if SentenceTransformer is None:
                    raise EmbeddingProviderError("sentence-transformers not installed.")
                try:
                    self._model = SentenceTransformer(
                        self.model_name,
                        device=self.device,
                        local_files_only=self.local_files_only,
                    )
                except Exception as ex:  # noqa: BLE001
                    raise EmbeddingProviderError(
                        f"Cannot load embedding model '{self.model_name}': {ex}"
                    ) from ex
            return self._model

    def _encode_batch(self, texts: list[str]) -> list[list[float]]:
        model = self._loaded()
        try:
            rows = model.encode(
                texts,
                normalize_embeddings=True,
                convert_to_numpy=True,
                show_progress_bar=False,
            )
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingProviderError(f"Embedding failed: {ex}") from ex
        return [[float(x) for x in row] for row in rows]

    async def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        if not texts:
            return []
        return await asyncio.to_thread(self._encode_batch, list(texts))

    async def embed_query(self, text: str) -> list[float]:
        (vector,) = await asyncio.to_thread(self._encode_batch, [text])
        return vector
