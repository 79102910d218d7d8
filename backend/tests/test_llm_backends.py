from __future__ import annotations

import json
from types import SimpleNamespace

import httpx
import openai
import pytest

from app.core.config import Settings
from app.services.llm_backends import (
    DEEPSEEK,
    HUGGINGFACE,
    BackendError,
    DeepSeekBackend,
    GenerationParams,
    GenerationPrompt,
    HuggingFaceBackend,
    build_backends,
)

PROMPT = GenerationPrompt(system="system text", user="user text")
PARAMS = GenerationParams(temperature=0.6, max_tokens=1200)


class _DummyCompletions:
    def __init__(self, content, recorder):
        self.content = content
        self.recorder = recorder

    def create(self, **kwargs):
        self.recorder.append(kwargs)
        if isinstance(self.content, Exception):
            raise self.content
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _dummy_openai(content, recorder):
    class _DummyClient:
        def __init__(self, *args, **kwargs):
            recorder.append(("client", kwargs))
            self.chat = SimpleNamespace(completions=_DummyCompletions(content, recorder))

    return _DummyClient


def test_deepseek_sends_chat_request(monkeypatch):
    calls = []
    monkeypatch.setattr("openai.OpenAI", _dummy_openai('{"ok": true}', calls))
    backend = DeepSeekBackend("sk-test", base_url="https://api.deepseek.com/v1", model="deepseek-chat", timeout=5)

    assert backend.complete(PROMPT, PARAMS) == '{"ok": true}'

    assert calls[0] == ("client", {"api_key": "sk-test", "base_url": "https://api.deepseek.com/v1", "timeout": 5})
    request = calls[1]
    assert request["model"] == "deepseek-chat"
    assert request["temperature"] == 0.6
    assert request["max_tokens"] == 1200
    assert request["messages"] == [
        {"role": "system", "content": "system text"},
        {"role": "user", "content": "user text"},
    ]


def test_deepseek_empty_content_is_a_failure(monkeypatch):
    monkeypatch.setattr("openai.OpenAI", _dummy_openai("   ", []))
    backend = DeepSeekBackend("sk-test", base_url="https://example.test", model="m")

    with pytest.raises(BackendError):
        backend.complete(PROMPT, PARAMS)


def test_deepseek_sdk_errors_become_backend_errors(monkeypatch):
    monkeypatch.setattr("openai.OpenAI", _dummy_openai(openai.OpenAIError("quota exceeded"), []))
    backend = DeepSeekBackend("sk-test", base_url="https://example.test", model="m")

    with pytest.raises(BackendError, match="quota exceeded"):
        backend.complete(PROMPT, PARAMS)


def _patch_httpx(monkeypatch, handler):
    real_client = httpx.Client

    def _client(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(httpx, "Client", _client)


def test_huggingface_posts_instruction_prompt(monkeypatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=[{"generated_text": '{"daily_tasks": []}'}])

    _patch_httpx(monkeypatch, handler)
    backend = HuggingFaceBackend("hf-test", model_url="https://hf.test/models/m")

    assert backend.complete(PROMPT, GenerationParams(0.6, 1500)) == '{"daily_tasks": []}'
    assert seen["auth"] == "Bearer hf-test"
    assert seen["body"]["parameters"] == {"max_new_tokens": 1500, "temperature": 0.6, "return_full_text": False}
    assert seen["body"]["inputs"].startswith("[INST]")
    assert "system text" in seen["body"]["inputs"]


def test_huggingface_accepts_dict_response(monkeypatch):
    _patch_httpx(monkeypatch, lambda request: httpx.Response(200, json={"generated_text": "{}"}))
    backend = HuggingFaceBackend("hf-test", model_url="https://hf.test/models/m")

    assert backend.complete(PROMPT, PARAMS) == "{}"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, text="model loading"),
        httpx.Response(200, json=[]),
        httpx.Response(200, json={"error": "nope"}),
        httpx.Response(200, text="not json"),
    ],
)
def test_huggingface_failures_become_backend_errors(monkeypatch, response):
    _patch_httpx(monkeypatch, lambda request: response)
    backend = HuggingFaceBackend("hf-test", model_url="https://hf.test/models/m")

    with pytest.raises(BackendError):
        backend.complete(PROMPT, PARAMS)


def test_build_backends_only_includes_configured_keys():
    assert build_backends(Settings(deepseek_api_key=None, huggingface_api_key=None)) == []

    names = [backend.name for backend in build_backends(Settings(deepseek_api_key="a", huggingface_api_key="b"))]
    assert names == [DEEPSEEK, HUGGINGFACE]


def test_hf_api_key_alias(monkeypatch):
    monkeypatch.delenv("HUGGINGFACE_API_KEY", raising=False)
    monkeypatch.setenv("HF_API_KEY", "hf-from-env")

    assert Settings().huggingface_api_key == "hf-from-env"
