# clause_clarity/application/use_cases/analyze_clause.py
"""Analysis orchestration: three concurrent facet requests per clause, plus batch fan-out.

Pipeline per clause:
1. Validate input, check credentials (before any model call)
2. Launch simplification / risky terms / legal references concurrently
3. Wait until all three settle
4. Parse + validate JSON facets independently (never fatal)
5. Hand the result to the history collaborator (best-effort)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from clause_clarity.application.ports.credentials_port import CredentialsPort
from clause_clarity.application.ports.history_port import HistoryPort
from clause_clarity.application.ports.llm_port import (
    DEFAULT_GENERATION,
    GenerationParams,
    ModelPort,
)
from clause_clarity.application.ports.telemetry_port import NullTelemetry, TelemetryPort
from clause_clarity.application.prompts import analysis_prompts
from clause_clarity.application.services.provider_calls import with_timeout
from clause_clarity.domain.errors import (
    ConfigurationError,
    DomainError,
    MissingCredentialsError,
    ModelProviderError,
    ParseError,
    ProviderError,
    ValidationError,
)
from clause_clarity.domain.models import AnalysisFacets, StrategyConfig
from clause_clarity.domain.services.response_parsing import (
    require_json_array,
    validate_legal_references,
    validate_risky_terms,
)
from clause_clarity.domain.services.strategy import select_prompt_set
from clause_clarity.domain.types import Result

logger = logging.getLogger(__name__)

DEFAULT_MAX_BATCH = 10


class AnalyzeClause:
    """
    Application use case producing AnalysisFacets for one clause or a batch.
    Uses only ports; ProviderError propagates, parse/validation problems never do.
    """

    def __init__(
        self,
        model: ModelPort,
        credentials: CredentialsPort | None = None,
        history: HistoryPort | None = None,
        telemetry: TelemetryPort | None = None,
        generation: GenerationParams = DEFAULT_GENERATION,
        timeout_s: float | None = None,
        max_batch: int = DEFAULT_MAX_BATCH,
        concurrency_limit: int | None = None,
    ) -> None:
        self.model = model
        self.credentials = credentials
        self.history = history
        self.telemetry = telemetry or NullTelemetry()
        self.generation = generation
        self.timeout_s = timeout_s
        self.max_batch = max_batch
        self.concurrency_limit = concurrency_limit

    # ---------- single clause ----------

    async def analyze(self, clause: str, config: StrategyConfig | None = None) -> AnalysisFacets:
        self._validate(clause)
        self.require_credentials()
        return await self._analyze_one(clause, config or StrategyConfig())

    async def _analyze_one(self, clause: str, config: StrategyConfig) -> AnalysisFacets:
        prompts = analysis_prompts(select_prompt_set(config))
        outcomes = await asyncio.gather(
            self._complete(prompts.simplification.format(clause=clause)),
            self._complete(prompts.risky_terms.format(clause=clause)),
            self._complete(prompts.legal_references.format(clause=clause)),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        explanation, risky_raw, references_raw = outcomes

        facets = AnalysisFacets(
            explanation=str(explanation).strip(),
            risky_terms=validate_risky_terms(self._parse(risky_raw, "risky_terms")),
            legal_references=validate_legal_references(
                self._parse(references_raw, "legal_references")
            ),
        )
        self.telemetry.incr("analysis.completed")
        await self._save(clause, facets)
        return facets

    async def _complete(self, prompt: str) -> str:
        try:
            return await with_timeout(
                self.model.complete(prompt, self.generation),
                self.timeout_s,
                ModelProviderError,
                "model call",
            )
        except ProviderError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise ModelProviderError(f"model call failed: {ex}") from ex

    @staticmethod
    def _parse(raw: Any, facet: str) -> list[Any]:
        try:
            return require_json_array(raw if isinstance(raw, str) else None)
        except ParseError as ex:
            logger.warning("Could not parse %s response (%s), using empty list", facet, ex.detail)
            return []

    async def _save(self, clause: str, facets: AnalysisFacets) -> None:
        if self.history is None:
            return
        try:
            await self.history.save(clause, facets)
        except Exception as ex:  # noqa: BLE001
            logger.warning("Failed to save analysis history: %s", ex)

    # ---------- batch ----------

    async def analyze_batch(
        self,
        clauses: Sequence[str],
        config: StrategyConfig | None = None,
    ) -> list[AnalysisFacets]:
        """All clauses concurrently; the first failure cancels the rest and propagates."""
        self._preflight(clauses)
        cfg = config or StrategyConfig()
        gate = self._gate()
        tasks = [asyncio.create_task(self._bounded(gate, c, cfg)) for c in clauses]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            # let siblings finish cancelling so their errors are retrieved here
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def analyze_batch_settled(
        self,
        clauses: Sequence[str],
        config: StrategyConfig | None = None,
    ) -> list[Result[AnalysisFacets, DomainError]]:
        """Same fan-out, but each clause's failure is reported in its own Result."""
        self._preflight(clauses)
        cfg = config or StrategyConfig()
        gate = self._gate()
        outcomes = await asyncio.gather(
            *(self._bounded(gate, c, cfg) for c in clauses), return_exceptions=True
        )
        results: list[Result[AnalysisFacets, DomainError]] = []
        for outcome in outcomes:
            if isinstance(outcome, DomainError):
                results.append(Result.failure(outcome))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(Result.success(outcome))
        return results

    def _preflight(self, clauses: Sequence[str]) -> None:
        if len(clauses) > self.max_batch:
            raise ConfigurationError(
                f"Batch of {len(clauses)} clauses exceeds the limit of {self.max_batch}"
            )
        for clause in clauses:
            self._validate(clause)
        if clauses:
            self.require_credentials()

    def _gate(self) -> asyncio.Semaphore | None:
        if self.concurrency_limit and self.concurrency_limit > 0:
            return asyncio.Semaphore(self.concurrency_limit)
        return None

    async def _bounded(
        self, gate: asyncio.Semaphore | None, clause: str, config: StrategyConfig
    ) -> AnalysisFacets:
        if gate is None:
            return await self._analyze_one(clause, config)
        async with gate:
            return await self._analyze_one(clause, config)

    # ---------- checks ----------

    @staticmethod
    def _validate(clause: str) -> None:
        if not clause or not clause.strip():
            raise ValidationError("clause must not be empty")

    def require_credentials(self) -> None:
        if self.credentials is not None and not self.credentials.get_api_key():
            raise MissingCredentialsError("API key not found; add it in settings")
