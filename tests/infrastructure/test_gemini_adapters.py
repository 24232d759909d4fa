"""Gemini model/embedding adapters against a fake google-genai SDK."""

import asyncio
import sys
import types

import pytest

from clause_clarity.application.ports.llm_port import GenerationParams
from clause_clarity.domain.errors import (
    EmbeddingProviderError,
    MissingCredentialsError,
    ModelProviderError,
)
from clause_clarity.infrastructure.credentials.static_credentials import StaticCredentials
from clause_clarity.infrastructure.embeddings.gemini_embedding_adapter import (
    GeminiEmbeddingAdapter,
)
from clause_clarity.infrastructure.llm.gemini_adapter import GeminiModelAdapter, status_of


class FakeAPIError(Exception):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code


class FakeModels:
    def __init__(self, client: "FakeClient") -> None:
        self.client = client

    async def generate_content(self, model, contents, config):  # type: ignore[no-untyped-def]
        self.client.calls.append(("generate", model, contents, config))
        if self.client.error is not None:
            raise self.client.error
        return types.SimpleNamespace(text="Plain answer.")

    async def embed_content(self, model, contents):  # type: ignore[no-untyped-def]
        self.client.calls.append(("embed", model, contents, None))
        if self.client.error is not None:
            raise self.client.error
        return types.SimpleNamespace(
            embeddings=[types.SimpleNamespace(values=[float(len(c)), 1.0]) for c in contents]
        )


class FakeClient:
    created: list["FakeClient"] = []
    error: Exception | None = None

    def __init__(self, api_key=None):  # type: ignore[no-untyped-def]
        self.api_key = api_key
        self.calls: list[tuple] = []
        self.aio = types.SimpleNamespace(models=FakeModels(self))
        FakeClient.created.append(self)


class FakeGenerateContentConfig:
    def __init__(self, **kwargs):  # type: ignore[no-untyped-def]
        self.kwargs = kwargs


@pytest.fixture
def fake_genai(monkeypatch):
    FakeClient.created = []
    FakeClient.error = None
    genai = types.ModuleType("google.genai")
    genai.Client = FakeClient
    genai_types = types.ModuleType("google.genai.types")
    genai_types.GenerateContentConfig = FakeGenerateContentConfig
    monkeypatch.setitem(sys.modules, "google.genai", genai)
    monkeypatch.setitem(sys.modules, "google.genai.types", genai_types)
    return FakeClient


def test_complete_passes_generation_parameters(fake_genai):
    adapter = GeminiModelAdapter(credentials=StaticCredentials("secret"))

    text = asyncio.run(adapter.complete("Explain this clause.", GenerationParams()))

    assert text == "Plain answer."
    client = fake_genai.created[0]
    assert client.api_key == "secret"
    kind, model, contents, config = client.calls[0]
    assert (kind, model, contents) == ("generate", "gemini-2.0-flash", "Explain this clause.")
    assert config.kwargs == {
        "temperature": 0.2,
        "top_p": 0.8,
        "top_k": 40,
        "max_output_tokens": 2048,
    }


def test_client_is_created_once(fake_genai):
    adapter = GeminiModelAdapter(credentials=StaticCredentials("secret"))
    asyncio.run(adapter.complete("a"))
    asyncio.run(adapter.complete("b"))
    assert len(fake_genai.created) == 1


def test_quota_error_keeps_status(fake_genai):
    fake_genai.error = FakeAPIError(429, "RESOURCE_EXHAUSTED")
    adapter = GeminiModelAdapter(credentials=StaticCredentials("secret"))

    with pytest.raises(ModelProviderError) as exc_info:
        asyncio.run(adapter.complete("x"))

    assert exc_info.value.is_quota
    assert "RESOURCE_EXHAUSTED" in str(exc_info.value)


def test_missing_key_fails_before_client_creation(fake_genai):
    adapter = GeminiModelAdapter(credentials=StaticCredentials("  "))

    with pytest.raises(MissingCredentialsError):
        asyncio.run(adapter.complete("x"))
    assert fake_genai.created == []


def test_embedding_adapter_returns_one_vector_per_text(fake_genai):
    adapter = GeminiEmbeddingAdapter(credentials=StaticCredentials("secret"))

    vectors = asyncio.run(adapter.embed_texts(["ab", "abcd"]))
    query = asyncio.run(adapter.embed_query("abc"))

    assert vectors == [[2.0, 1.0], [4.0, 1.0]]
    assert query == [3.0, 1.0]
    assert fake_genai.created[0].calls[0][1] == "text-embedding-004"


def test_embedding_adapter_translates_errors(fake_genai):
    fake_genai.error = FakeAPIError(503, "UNAVAILABLE")
    adapter = GeminiEmbeddingAdapter(credentials=StaticCredentials("secret"))

    with pytest.raises(EmbeddingProviderError) as exc_info:
        asyncio.run(adapter.embed_query("x"))
    assert exc_info.value.status == 503


def test_empty_text_list_makes_no_call(fake_genai):
    adapter = GeminiEmbeddingAdapter(credentials=StaticCredentials("secret"))
    assert asyncio.run(adapter.embed_texts([])) == []
    assert fake_genai.created == []


def test_status_of():
    assert status_of(FakeAPIError(401, "x")) == 401
    assert status_of(RuntimeError("x")) is None
