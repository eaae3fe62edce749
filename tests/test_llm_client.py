from __future__ import annotations

import pytest

from ai_news_ingest.core.config import OpenRouterConfig
from ai_news_ingest.core.errors import LLMError
from ai_news_ingest.processing.llm_client import OpenRouterClient, parse_json


class _Resp:
    def __init__(self, status_code: int = 200, payload=None, text: str = "") -> None:
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("not json")
        return self._payload


def _client(resp=None, exc: Exception | None = None, calls: list | None = None) -> OpenRouterClient:
    def http_post(url, **kwargs):
        if calls is not None:
            calls.append((url, kwargs))
        if exc is not None:
            raise exc
        return resp

    config = OpenRouterConfig(api_key="test-key", base_url="https://router.example/api/v1/", model="m1")
    return OpenRouterClient(config, http_post=http_post)


def test_parse_json_variants() -> None:
    assert parse_json('{"a": 1}') == {"a": 1}
    assert parse_json('```json\n{"a": 1}\n```') == {"a": 1}
    assert parse_json('Here you go: {"a": "x}y", "b": [1, 2,],} trailing') == {"a": "x}y", "b": [1, 2]}
    assert parse_json("no json here") is None
    assert parse_json("") is None


def test_generate_posts_chat_completion() -> None:
    calls: list = []
    resp = _Resp(payload={"choices": [{"message": {"content": "  hello  "}}]})
    text = _client(resp, calls=calls).generate("prompt", system_prompt="sys", temperature=0.5, max_tokens=10)

    assert text == "hello"
    url, kwargs = calls[0]
    assert url == "https://router.example/api/v1/chat/completions"
    assert kwargs["headers"]["Authorization"] == "Bearer test-key"
    assert kwargs["json"]["model"] == "m1"
    assert kwargs["json"]["messages"][0] == {"role": "system", "content": "sys"}
    assert kwargs["json"]["messages"][1] == {"role": "user", "content": "prompt"}


def test_generate_errors_are_llm_errors() -> None:
    with pytest.raises(LLMError):
        _client(_Resp(status_code=429, text="rate limited")).generate("p")
    with pytest.raises(LLMError):
        _client(_Resp(payload=None)).generate("p")
    with pytest.raises(LLMError):
        _client(_Resp(payload={"choices": []})).generate("p")
    with pytest.raises(LLMError):
        _client(exc=ConnectionError("down")).generate("p")


def test_missing_key_disables_client() -> None:
    client = OpenRouterClient(OpenRouterConfig(api_key=""), http_post=lambda *a, **k: None)
    assert client.enabled is False
    with pytest.raises(LLMError):
        client.generate("p")
