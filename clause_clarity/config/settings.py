"""Application settings with environment-driven configuration.

Why: Single place that reads the environment; strategy toggles here are only
     the defaults for a fresh strategy-config file.
"""

import os
from dataclasses import dataclass, field


def _flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class AppSettings:
    """Application settings loaded from environment variables.

    This is the ONLY place where environment variables are read.
    All other layers receive settings via dependency injection.

    Strategy defaults (all on):
    - use_advanced_orchestration: richer prompts + batch support
    - enable_batch_processing:    allow multi-clause analysis
    - enable_advanced_prompts:    advanced analysis templates
    - enable_semantic_retrieval:  answer follow-ups from retrieved chunks
    """

    # ===== LLM Configuration =====
    llm_backend: str = field(default_factory=lambda: os.getenv("LLM_BACKEND", "gemini").lower())
    # Supported: "gemini" | "openai" (any OpenAI-compatible server)

    gemini_api_key: str = field(default_factory=lambda: os.getenv("GEMINI_API_KEY", ""))
    llm_api_key: str = field(default_factory=lambda: os.getenv("LLM_API_KEY", ""))
    # Empty = missing credentials; analysis is refused before any model call

    gemini_model: str = field(
        default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    )
    llm_base_url: str = field(
        default_factory=lambda: os.getenv("LLM_BASE_URL", "http://localhost:8000/v1")
    )
    llm_model: str = field(
        default_factory=lambda: os.getenv("LLM_MODEL", "meta-llama/Meta-Llama-3.1-8B-Instruct")
    )
    provider_timeout_s: float = field(
        default_factory=lambda: float(os.getenv("PROVIDER_TIMEOUT_S", "60"))
    )
    # 0 disables the caller-level timeout

    # ===== Embedding Configuration =====
    embedding_backend: str = field(
        default_factory=lambda: os.getenv("EMBEDDING_BACKEND", "gemini").lower()
    )
    # Supported: "gemini" | "sentence-transformers"

    gemini_embedding_model: str = field(
        default_factory=lambda: os.getenv("GEMINI_EMBEDDING_MODEL", "text-embedding-004")
    )
    embedding_model: str = field(
        default_factory=lambda: os.getenv(
            "EMBEDDING_MODEL", "sentence-transformers/all-MiniLM-L6-v2"
        )
    )
    embedding_device: str = field(default_factory=lambda: os.getenv("EMBEDDING_DEVICE", "cpu"))
    # Supported: "cpu" | "cuda" | "mps"

    # ===== Index / Chunking =====
    index_cache_capacity: int = field(
        default_factory=lambda: int(os.getenv("INDEX_CACHE_CAPACITY", "10"))
    )
    chunk_size: int = field(default_factory=lambda: int(os.getenv("CHUNK_SIZE", "200")))
    chunk_overlap: int = field(default_factory=lambda: int(os.getenv("CHUNK_OVERLAP", "50")))

    # ===== Batch =====
    max_batch_size: int = field(default_factory=lambda: int(os.getenv("MAX_BATCH_SIZE", "10")))
    batch_concurrency: int = field(
        default_factory=lambda: int(os.getenv("BATCH_CONCURRENCY", "0"))
    )
    # 0 = unbounded up to max_batch_size

    # ===== Persistence =====
    history_path: str = field(
        default_factory=lambda: os.getenv("HISTORY_PATH", "var/history/analyses.jsonl")
    )
    strategy_config_path: str = field(
        default_factory=lambda: os.getenv("STRATEGY_CONFIG_PATH", "var/strategy_config.json")
    )

    # ===== Strategy Defaults =====
    use_advanced_orchestration: bool = field(
        default_factory=lambda: _flag("USE_ADVANCED_ORCHESTRATION")
    )
    enable_batch_processing: bool = field(
        default_factory=lambda: _flag("ENABLE_BATCH_PROCESSING")
    )
    enable_advanced_prompts: bool = field(
        default_factory=lambda: _flag("ENABLE_ADVANCED_PROMPTS")
    )
    enable_semantic_retrieval: bool = field(
        default_factory=lambda: _flag("ENABLE_SEMANTIC_RETRIEVAL")
    )

    # ===== Telemetry Configuration =====
    telemetry_enabled: bool = field(default_factory=lambda: _flag("TELEMETRY_ENABLED", "false"))
    otlp_endpoint: str = field(default_factory=lambda: os.getenv("OTLP_ENDPOINT", ""))
    # Empty string = no OTLP export

    telemetry_environment: str = field(
        default_factory=lambda: os.getenv("TELEMETRY_ENVIRONMENT", "production")
    )

    # ===== Logging =====
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
