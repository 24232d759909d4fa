from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from clause_clarity.application.ports.credentials_port import CredentialsPort
from clause_clarity.application.ports.embedding_port import EmbeddingPort
from clause_clarity.domain.errors import EmbeddingProviderError
from clause_clarity.infrastructure.llm.gemini_adapter import make_client, status_of


@dataclass
class GeminiEmbeddingAdapter(EmbeddingPort):
    """Remote embeddings via google-genai `embed_content`."""

    credentials: CredentialsPort
    model: str = "text-embedding-004"
    _client: Any | None = field(default=None, repr=False)

    def _ensure_client(self) -> Any:
        if self._client is None:
            self._client = make_client(self.credentials)
        return self._client

    async def _embed(self, contents: list[str]) -> list[list[float]]:
        client = self._ensure_client()
        try:
            resp: Any = await client.aio.models.embed_content(model=self.model, contents=contents)
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingProviderError(
                f"Gemini embedding failed: {ex}", status=status_of(ex)
            ) from ex
        embeddings = getattr(resp, "embeddings", None) or []
        return [list(e.values or []) for e in embeddings]

    async def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        if not texts:
            return []
        return await self._embed(list(texts))

    async def embed_query(self, text: str) -> list[float]:
        vectors = await self._embed([text])
        if len(vectors) != 1:
            raise EmbeddingProviderError(
                f"Gemini returned {len(vectors)} embeddings for one query"
            )
        return vectors[0]
