from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class GenerationParams:
    temperature: float = 0.2
    top_p: float = 0.8
    top_k: int = 40
    max_output_tokens: int = 2048


DEFAULT_GENERATION = GenerationParams()


@runtime_checkable
class ModelPort(Protocol):
    async def complete(self, prompt: str, params: GenerationParams = DEFAULT_GENERATION) -> str:
        """Single-shot text completion.

        Raises:
            ModelProviderError: on quota, auth or network failure (carries status)
            MissingCredentialsError: when no API key is configured
        """
        ...
