import asyncio
import sys
import types

import pytest

from clause_clarity.application.ports.llm_port import GenerationParams
from clause_clarity.domain.errors import MissingCredentialsError, ModelProviderError
from clause_clarity.infrastructure.credentials.static_credentials import StaticCredentials
from clause_clarity.infrastructure.llm.openai_compatible_adapter import OpenAICompatibleAdapter


class _StatusError(Exception):
    status_code = 429


class _FakeCompletions:
    def __init__(self, owner: "_FakeAsyncOpenAI") -> None:
        self.owner = owner

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.owner.requests.append(kwargs)
        if self.owner.fail:
            raise _StatusError("rate limited")
        message = types.SimpleNamespace(content="Short answer.")
        return types.SimpleNamespace(choices=[types.SimpleNamespace(message=message)])


class _FakeAsyncOpenAI:
    instances: list["_FakeAsyncOpenAI"] = []
    fail = False

    def __init__(self, base_url=None, api_key=None):  # type: ignore[no-untyped-def]
        self.base_url = base_url
        self.api_key = api_key
        self.requests: list[dict] = []
        self.chat = types.SimpleNamespace(completions=_FakeCompletions(self))
        _FakeAsyncOpenAI.instances.append(self)


@pytest.fixture
def fake_openai(monkeypatch):
    _FakeAsyncOpenAI.instances = []
    _FakeAsyncOpenAI.fail = False
    module = types.ModuleType("openai")
    module.AsyncOpenAI = _FakeAsyncOpenAI
    monkeypatch.setitem(sys.modules, "openai", module)
    return _FakeAsyncOpenAI


def test_chat_request_carries_prompt_and_params(fake_openai):
    adapter = OpenAICompatibleAdapter(
        base_url="http://localhost:8000/v1",
        credentials=StaticCredentials("sk-test"),
        model="local-model",
    )

    text = asyncio.run(adapter.complete("What is a lien?", GenerationParams(max_output_tokens=64)))

    assert text == "Short answer."
    client = fake_openai.instances[0]
    assert (client.base_url, client.api_key) == ("http://localhost:8000/v1", "sk-test")
    req = client.requests[0]
    assert req["model"] == "local-model"
    assert req["messages"] == [{"role": "user", "content": "What is a lien?"}]
    assert req["max_tokens"] == 64
    assert "top_k" not in req


def test_errors_keep_status(fake_openai):
    fake_openai.fail = True
    adapter = OpenAICompatibleAdapter("http://x/v1", StaticCredentials("sk-test"))

    with pytest.raises(ModelProviderError) as exc_info:
        asyncio.run(adapter.complete("x"))
    assert exc_info.value.is_quota


def test_missing_key(fake_openai):
    adapter = OpenAICompatibleAdapter("http://x/v1", StaticCredentials(None))

    with pytest.raises(MissingCredentialsError):
        asyncio.run(adapter.complete("x"))
    assert fake_openai.instances == []
