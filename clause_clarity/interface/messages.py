"""User-visible failure messages and status codes shared by CLI and HTTP.

Never exposes tracebacks or parser internals.
"""

from __future__ import annotations

from dataclasses import dataclass

from clause_clarity.domain.errors import (
    ConfigurationError,
    MissingCredentialsError,
    ProviderError,
    ValidationError,
)


@dataclass(frozen=True)
class FailureMessage:
    status: int
    message: str


def describe_failure(err: BaseException) -> FailureMessage:
    if isinstance(err, MissingCredentialsError):
        return FailureMessage(401, "API key not found. Please add your API key in settings.")
    if isinstance(err, ProviderError):
        if err.is_quota:
            return FailureMessage(429, "API quota exceeded. Please try again later.")
        return FailureMessage(503, "The AI provider is currently unavailable. Please try again.")
    if isinstance(err, ValidationError | ConfigurationError):
        return FailureMessage(400, str(err))
    return FailureMessage(500, "Internal processing error. Please try again.")
