"""Application ports package.

Re-exports the collaborator contracts consumed by the core.
"""

from clause_clarity.application.ports.credentials_port import CredentialsPort
from clause_clarity.application.ports.embedding_port import EmbeddingPort
from clause_clarity.application.ports.history_port import HistoryPort
from clause_clarity.application.ports.llm_port import (
    DEFAULT_GENERATION,
    GenerationParams,
    ModelPort,
)
from clause_clarity.application.ports.strategy_config_port import StrategyConfigStorePort
from clause_clarity.application.ports.telemetry_port import NullTelemetry, TelemetryPort

__all__ = [
    "CredentialsPort",
    "DEFAULT_GENERATION",
    "EmbeddingPort",
    "GenerationParams",
    "HistoryPort",
    "ModelPort",
    "NullTelemetry",
    "StrategyConfigStorePort",
    "TelemetryPort",
]
