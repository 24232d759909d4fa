from dataclasses import dataclass
from importlib import import_module
from typing import Any

from clause_clarity.application.ports.credentials_port import CredentialsPort
from clause_clarity.application.ports.llm_port import (
    DEFAULT_GENERATION,
    GenerationParams,
    ModelPort,
)
from clause_clarity.domain.errors import MissingCredentialsError, ModelProviderError


@dataclass
class OpenAICompatibleAdapter(ModelPort):
    """Any OpenAI-compatible chat endpoint (vLLM, llama.cpp server, OpenAI itself)."""

    base_url: str  # e.g. "http://localhost:8000/v1"
    credentials: CredentialsPort
    model: str = "meta-llama/Meta-Llama-3.1-8B-Instruct"

    def __post_init__(self) -> None:
        # Defer import of OpenAI to complete() to avoid hard dependency in tests
        self._client: Any | None = None

    async def complete(self, prompt: str, params: GenerationParams = DEFAULT_GENERATION) -> str:
        if self._client is None:
            api_key = self.credentials.get_api_key()
            if not api_key:
                raise MissingCredentialsError("LLM API key not found")
            module = import_module("openai")
            self._client = module.AsyncOpenAI(base_url=self.base_url, api_key=api_key)
        try:
            # top_k is not part of the chat-completions schema
            resp: Any = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=params.temperature,
                top_p=params.top_p,
                max_tokens=params.max_output_tokens,
            )
        except Exception as ex:  # noqa: BLE001
            # Translate external errors to domain-specific errors
            raise ModelProviderError(
                f"LLM communication failed: {ex}",
                status=getattr(ex, "status_code", None),
            ) from ex
        choice = resp.choices[0]
        return choice.message.content or ""
