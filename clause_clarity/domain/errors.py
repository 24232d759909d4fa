"""Domain errors (typed).

Why: Unified error family for the application layer, without infra leaks.
Adapters translate library exceptions into ProviderError subclasses.
"""

from __future__ import annotations

from dataclasses import dataclass


class DomainError(Exception):
    """Base class for domain-specific errors."""


class ConfigurationError(DomainError):
    """Invalid configuration (chunking params, disallowed batch invocation)."""


class ValidationError(DomainError):
    """Invalid input/domain state."""


@dataclass(frozen=True)
class ParseError(DomainError):
    """Model response did not match the expected shape.

    Raised when no parse strategy yields a value; the analysis use case
    logs it and degrades the facet to an empty list.
    """

    detail: str = ""


class ProviderError(DomainError):
    """Model or embedding backend failed (auth, quota, timeout, malformed response)."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status

    @property
    def is_quota(self) -> bool:
        return self.status == 429

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"[{self.status}] {self.message}"


class ModelProviderError(ProviderError):
    """Language-model backend failed or is misconfigured."""


class EmbeddingProviderError(ProviderError):
    """Embedding backend failed, is misconfigured or returned malformed vectors."""


class MissingCredentialsError(ProviderError):
    """No API key is available for the configured provider."""

    def __init__(self, message: str = "API key not found") -> None:
        super().__init__(message, status=401)
