"""HTTP API for clause analysis and follow-up questions.

Why: Consumable API without business logic; pure delegation. One process
     owns one index cache, so repeated follow-ups on a clause reuse it.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from clause_clarity.application.ports.strategy_config_port import StrategyConfigStorePort
from clause_clarity.application.use_cases.answer_followup import AnswerFollowup
from clause_clarity.domain.errors import DomainError
from clause_clarity.domain.models import AnalysisFacets
from clause_clarity.domain.services.strategy import describe_capabilities
from clause_clarity.interface.messages import describe_failure

logger = logging.getLogger(__name__)


@dataclass
class Services:
    followup: AnswerFollowup
    config_store: StrategyConfigStorePort


def build_services() -> Services:
    from clause_clarity.config.composition import (
        build_followup_use_case,
        build_strategy_config_store,
    )
    from clause_clarity.config.settings import AppSettings

    settings = AppSettings()
    return Services(
        followup=build_followup_use_case(settings),
        config_store=build_strategy_config_store(settings),
    )


# Pydantic models for request/response validation
class RiskyTermModel(BaseModel):
    term: str
    severity: str
    explanation: str


class LegalReferenceModel(BaseModel):
    title: str
    url: str
    relevance: str


class FacetsModel(BaseModel):
    explanation: str = ""
    risky_terms: list[RiskyTermModel] = Field(default_factory=list)
    legal_references: list[LegalReferenceModel] = Field(default_factory=list)


class AnalyzeRequestModel(BaseModel):
    clause: str


class FollowupRequestModel(BaseModel):
    question: str
    clause: str
    facets: FacetsModel | None = None


class FollowupResponseModel(BaseModel):
    answer: str
    strategy: str
    relevant_context: str | None = None
    metrics: dict[str, Any] | None = None


class BatchRequestModel(BaseModel):
    clauses: list[str]


class ConfigUpdateModel(BaseModel):
    use_advanced_orchestration: bool | None = None
    enable_batch_processing: bool | None = None
    enable_advanced_prompts: bool | None = None
    enable_semantic_retrieval: bool | None = None


def create_app(services: Services | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "services", None) is None:
            app.state.services = build_services()
        yield

    app = FastAPI(title="Clause Clarity API", version="1.0.0", lifespan=lifespan)
    app.state.services = services

    def _services(request: Request) -> Services:
        return request.app.state.services

    @app.exception_handler(DomainError)
    async def domain_error_handler(_request: Request, exc: DomainError) -> JSONResponse:
        failure = describe_failure(exc)
        logger.warning("Request failed (%d): %s", failure.status, exc)
        return JSONResponse(status_code=failure.status, content={"error": failure.message})

    @app.post("/v1/analyze")
    async def analyze(req: AnalyzeRequestModel, request: Request) -> dict[str, Any]:
        svc = _services(request)
        facets = await svc.followup.analyzer.analyze(req.clause, svc.config_store.load())
        return facets.to_dict()

    @app.post("/v1/followup", response_model=FollowupResponseModel)
    async def followup(req: FollowupRequestModel, request: Request) -> FollowupResponseModel:
        svc = _services(request)
        facets = AnalysisFacets.from_dict(req.facets.model_dump()) if req.facets else None
        result = await svc.followup.answer(
            req.question, req.clause, facets, svc.config_store.load()
        )
        return FollowupResponseModel(
            answer=result.answer,
            strategy=result.strategy.value,
            relevant_context=result.relevant_context,
            metrics=asdict(result.metrics) if result.metrics else None,
        )

    @app.post("/v1/batch")
    async def batch(req: BatchRequestModel, request: Request) -> dict[str, Any]:
        svc = _services(request)
        results = await svc.followup.process_batch(req.clauses, svc.config_store.load())
        return {"results": [f.to_dict() for f in results]}

    @app.get("/v1/config")
    async def get_config(request: Request) -> dict[str, Any]:
        return describe_capabilities(_services(request).config_store.load())

    @app.patch("/v1/config")
    async def update_config(req: ConfigUpdateModel, request: Request) -> dict[str, Any]:
        changes = req.model_dump(exclude_none=True)
        config = _services(request).config_store.update(**changes)
        return describe_capabilities(config)

    @app.get("/v1/cache")
    async def cache_stats(request: Request) -> dict[str, Any]:
        return _services(request).followup.index_cache.stats()

    @app.delete("/v1/cache")
    async def cache_clear(request: Request) -> dict[str, Any]:
        cache = _services(request).followup.index_cache
        cache.clear()
        return cache.stats()

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy", "service": "clause-clarity"}

    return app


app = create_app()
