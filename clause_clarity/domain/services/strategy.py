"""Pure decision table for follow-up answering and batch gating.

Config is always passed in; nothing here reads files or the environment.
"""

from __future__ import annotations

from enum import Enum

from clause_clarity.domain.errors import ConfigurationError
from clause_clarity.domain.models import StrategyConfig


class AnsweringStrategy(str, Enum):
    SEMANTIC = "semantic"
    FULL_CONTEXT = "full_context"
    LEGACY = "legacy"


class PromptSet(str, Enum):
    ADVANCED = "advanced"
    LEGACY = "legacy"


def select_strategy(config: StrategyConfig, has_facets: bool) -> AnsweringStrategy:
    """First matching rule wins."""
    if config.enable_semantic_retrieval and has_facets:
        return AnsweringStrategy.SEMANTIC
    if config.use_advanced_orchestration:
        return AnsweringStrategy.FULL_CONTEXT
    return AnsweringStrategy.LEGACY


def select_prompt_set(config: StrategyConfig) -> PromptSet:
    if config.use_advanced_orchestration and config.enable_advanced_prompts:
        return PromptSet.ADVANCED
    return PromptSet.LEGACY


def ensure_batch_allowed(config: StrategyConfig) -> None:
    """Raise ConfigurationError naming the first missing toggle."""
    if not config.use_advanced_orchestration:
        raise ConfigurationError(
            "Batch processing requires use_advanced_orchestration to be enabled"
        )
    if not config.enable_batch_processing:
        raise ConfigurationError(
            "Batch processing is disabled (enable_batch_processing is off)"
        )


def describe_capabilities(config: StrategyConfig) -> dict[str, object]:
    advanced = config.use_advanced_orchestration
    return {
        "api_type": "advanced" if advanced else "traditional",
        "features": {
            "batch_processing": advanced and config.enable_batch_processing,
            "advanced_prompts": advanced and config.enable_advanced_prompts,
            "parallel_processing": advanced,
            "semantic_retrieval": config.enable_semantic_retrieval,
        },
    }
