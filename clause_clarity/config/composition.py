from __future__ import annotations

from clause_clarity.application.ports.credentials_port import CredentialsPort
from clause_clarity.application.ports.embedding_port import EmbeddingPort
from clause_clarity.application.ports.llm_port import ModelPort
from clause_clarity.application.ports.strategy_config_port import StrategyConfigStorePort
from clause_clarity.application.ports.telemetry_port import NullTelemetry, TelemetryPort
from clause_clarity.application.services.embedding_index import EmbeddingIndexCache
from clause_clarity.application.services.retriever import Retriever
from clause_clarity.application.use_cases.analyze_clause import AnalyzeClause
from clause_clarity.application.use_cases.answer_followup import AnswerFollowup
from clause_clarity.config.settings import AppSettings
from clause_clarity.domain.errors import ConfigurationError
from clause_clarity.domain.models import StrategyConfig
from clause_clarity.domain.services.chunking import Chunker, ChunkingParams
from clause_clarity.infrastructure.credentials.static_credentials import StaticCredentials
from clause_clarity.infrastructure.embeddings.gemini_embedding_adapter import (
    GeminiEmbeddingAdapter,
)
from clause_clarity.infrastructure.embeddings.hf_sentence_transformers import HFEmbeddingAdapter
from clause_clarity.infrastructure.llm.gemini_adapter import GeminiModelAdapter
from clause_clarity.infrastructure.llm.openai_compatible_adapter import OpenAICompatibleAdapter
from clause_clarity.infrastructure.persistence.jsonl_history_store import JsonlHistoryStore
from clause_clarity.infrastructure.settings_store.json_strategy_config_store import (
    JsonStrategyConfigStore,
)


def _timeout(settings: AppSettings) -> float | None:
    return settings.provider_timeout_s if settings.provider_timeout_s > 0 else None


def build_credentials(settings: AppSettings) -> CredentialsPort:
    if settings.llm_backend == "openai":
        return StaticCredentials(settings.llm_api_key)
    return StaticCredentials(settings.gemini_api_key)


def build_model(settings: AppSettings, credentials: CredentialsPort | None = None) -> ModelPort:
    creds = credentials or build_credentials(settings)
    backend = settings.llm_backend
    if backend == "gemini":
        return GeminiModelAdapter(credentials=creds, model=settings.gemini_model)
    if backend == "openai":
        return OpenAICompatibleAdapter(
            base_url=settings.llm_base_url,
            credentials=creds,
            model=settings.llm_model,
        )
    raise ConfigurationError(f"Unknown LLM_BACKEND '{backend}' (expected gemini | openai)")


def build_embedding(settings: AppSettings) -> EmbeddingPort:
    backend = settings.embedding_backend
    if backend == "gemini":
        return GeminiEmbeddingAdapter(
            credentials=StaticCredentials(settings.gemini_api_key),
            model=settings.gemini_embedding_model,
        )
    if backend == "sentence-transformers":
        return HFEmbeddingAdapter(
            model_name=settings.embedding_model,
            device=settings.embedding_device,
        )
    raise ConfigurationError(
        f"Unknown EMBEDDING_BACKEND '{backend}' (expected gemini | sentence-transformers)"
    )


def build_telemetry(settings: AppSettings) -> TelemetryPort:
    """OpenTelemetry when enabled (degrades to no-op without the SDK), else NullTelemetry."""
    if not settings.telemetry_enabled:
        return NullTelemetry()
    from clause_clarity.infrastructure.telemetry.otel_adapter import (
        OpenTelemetryAdapter,
        OtelConfig,
    )

    cfg = OtelConfig(
        service_name="clause-clarity",
        otlp_endpoint=settings.otlp_endpoint or None,
        environment=settings.telemetry_environment,
    )
    return OpenTelemetryAdapter(cfg)


def build_index_cache(
    settings: AppSettings, telemetry: TelemetryPort | None = None
) -> EmbeddingIndexCache:
    return EmbeddingIndexCache(
        capacity=settings.index_cache_capacity,
        telemetry=telemetry,
        timeout_s=_timeout(settings),
    )


def build_strategy_config_store(settings: AppSettings) -> StrategyConfigStorePort:
    defaults = StrategyConfig(
        use_advanced_orchestration=settings.use_advanced_orchestration,
        enable_batch_processing=settings.enable_batch_processing,
        enable_advanced_prompts=settings.enable_advanced_prompts,
        enable_semantic_retrieval=settings.enable_semantic_retrieval,
    )
    return JsonStrategyConfigStore(path=settings.strategy_config_path, defaults=defaults)


def build_analyze_use_case(
    settings: AppSettings | None = None,
    telemetry: TelemetryPort | None = None,
) -> AnalyzeClause:
    settings = settings or AppSettings()
    credentials = build_credentials(settings)
    return AnalyzeClause(
        model=build_model(settings, credentials),
        credentials=credentials,
        history=JsonlHistoryStore(settings.history_path) if settings.history_path else None,
        telemetry=telemetry or build_telemetry(settings),
        timeout_s=_timeout(settings),
        max_batch=settings.max_batch_size,
        concurrency_limit=settings.batch_concurrency or None,
    )


def build_followup_use_case(
    settings: AppSettings | None = None,
    index_cache: EmbeddingIndexCache | None = None,
) -> AnswerFollowup:
    """Wire the follow-up use case; pass a long-lived cache to share indexes across calls."""
    settings = settings or AppSettings()
    telemetry = build_telemetry(settings)
    analyzer = build_analyze_use_case(settings, telemetry)
    return AnswerFollowup(
        model=analyzer.model,
        embedding=build_embedding(settings),
        index_cache=index_cache or build_index_cache(settings, telemetry),
        analyzer=analyzer,
        chunker=Chunker(ChunkingParams(settings.chunk_size, settings.chunk_overlap)),
        retriever=Retriever(telemetry),
        telemetry=telemetry,
        timeout_s=_timeout(settings),
    )
