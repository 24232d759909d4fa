from typing import Protocol, runtime_checkable


@runtime_checkable
class CredentialsPort(Protocol):
    """Identity-and-config collaborator; the core only consumes the key or its absence."""

    def get_api_key(self) -> str | None: ...
