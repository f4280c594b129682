"""
Unit Tests — LLM Client
=======================
Uses httpx.MockTransport so no request leaves the process.
"""
import json

import httpx
import pytest

from autoheal.core.errors import ModelRequestError
from autoheal.llm.client import LLMClient


REQUEST_BODY = {
    "model": "gpt-4",
    "messages": [
        {"role": "system", "content": "You are an expert Cypress test engineer."},
        {"role": "user", "content": "Fix this test."},
    ],
    "max_tokens": 1000,
    "temperature": 0.1,
}


def _completion(content):
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


def _client(handler, **kwargs) -> LLMClient:
    kwargs.setdefault("api_key", "sk-test")
    kwargs.setdefault("base_url", "https://llm.example.test/v1/")
    return LLMClient(transport=httpx.MockTransport(handler), **kwargs)


class TestComplete:

    def test_returns_reply_text(self):
        with _client(lambda request: _completion('{"analysis": "ok"}')) as client:
            assert client.complete(REQUEST_BODY) == '{"analysis": "ok"}'

    def test_posts_body_unchanged(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return _completion("reply")

        with _client(handler) as client:
            client.complete(REQUEST_BODY)

        assert seen["url"] == "https://llm.example.test/v1/chat/completions"
        assert seen["auth"] == "Bearer sk-test"
        assert seen["body"] == REQUEST_BODY

    def test_missing_api_key(self):
        calls = []
        client = _client(lambda request: calls.append(request) or _completion("x"), api_key="")
        with pytest.raises(ModelRequestError) as exc_info:
            client.complete(REQUEST_BODY)
        assert exc_info.value.stage == "request"
        assert calls == []

    @pytest.mark.parametrize(
        "payload",
        [
            {"choices": [{"message": {"content": ""}}]},
            {"choices": [{"message": {"content": None}}]},
            {"choices": []},
            {"unexpected": True},
        ],
    )
    def test_empty_reply(self, payload):
        with _client(lambda request: httpx.Response(200, json=payload)) as client:
            with pytest.raises(ModelRequestError):
                client.complete(REQUEST_BODY)

    def test_non_json_reply(self):
        with _client(lambda request: httpx.Response(200, text="<html>gateway</html>")) as client:
            with pytest.raises(ModelRequestError):
                client.complete(REQUEST_BODY)


class TestRetries:

    def test_retries_server_error(self):
        responses = iter([httpx.Response(503), _completion("second time lucky")])
        calls = []

        def handler(request):
            calls.append(request)
            return next(responses)

        with _client(handler) as client:
            assert client.complete(REQUEST_BODY) == "second time lucky"
        assert len(calls) == 2

    def test_retries_timeout(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ReadTimeout("timed out", request=request)
            return _completion("ok")

        with _client(handler) as client:
            assert client.complete(REQUEST_BODY) == "ok"
        assert len(calls) == 2

    def test_client_error_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(401, json={"error": "bad key"})

        with _client(handler, max_retries=3) as client:
            with pytest.raises(ModelRequestError) as exc_info:
                client.complete(REQUEST_BODY)
        assert len(calls) == 1
        assert "401" in str(exc_info.value)

    def test_exhausted_retries(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        with _client(handler, max_retries=3) as client:
            with pytest.raises(ModelRequestError):
                client.complete(REQUEST_BODY)
        assert len(calls) == 3
