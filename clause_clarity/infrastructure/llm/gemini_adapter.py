"""Gemini adapter (google-genai, async client).

The SDK is imported on first use.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from importlib import import_module
from typing import Any

from clause_clarity.application.ports.credentials_port import CredentialsPort
from clause_clarity.application.ports.llm_port import (
    DEFAULT_GENERATION,
    GenerationParams,
    ModelPort,
)
from clause_clarity.domain.errors import MissingCredentialsError, ModelProviderError


def status_of(ex: BaseException) -> int | None:
    """HTTP-like status carried by a google-genai / httpx error, if any."""
    for attr in ("code", "status_code"):
        value = getattr(ex, attr, None)
        if isinstance(value, int):
            return value
    return None


def make_client(credentials: CredentialsPort) -> Any:
    api_key = credentials.get_api_key()
    if not api_key:
        raise MissingCredentialsError("Gemini API key not found")
    genai = import_module("google.genai")
    return genai.Client(api_key=api_key)


@dataclass
class GeminiModelAdapter(ModelPort):
    credentials: CredentialsPort
    model: str = "gemini-2.0-flash"
    _client: Any | None = field(default=None, repr=False)

    def _ensure_client(self) -> Any:
        if self._client is None:
            self._client = make_client(self.credentials)
        return self._client

    async def complete(self, prompt: str, params: GenerationParams = DEFAULT_GENERATION) -> str:
        client = self._ensure_client()
        try:
            types = import_module("google.genai.types")
            config = types.GenerateContentConfig(
                temperature=params.temperature,
                top_p=params.top_p,
                top_k=params.top_k,
                max_output_tokens=params.max_output_tokens,
            )
            resp: Any = await client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )
        except Exception as ex:  # noqa: BLE001
            # Translate external errors to domain-specific errors
            raise ModelProviderError(
                f"Gemini request failed: {ex}", status=status_of(ex)
            ) from ex
        return resp.text or ""
