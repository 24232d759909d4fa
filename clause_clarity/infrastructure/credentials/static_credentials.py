from dataclasses import dataclass

from clause_clarity.application.ports.credentials_port import CredentialsPort


@dataclass(frozen=True)
class StaticCredentials(CredentialsPort):
    """API key resolved once by the composition root (from AppSettings-owned env)."""

    api_key: str | None = None

    def get_api_key(self) -> str | None:
        key = (self.api_key or "").strip()
        return key or None
