"""
Tests for the OpenAI text generator retry policy.
"""

import asyncio
from types import SimpleNamespace

import httpx
import openai
import pytest

from transcreator import llm_client
from transcreator.config import PipelineConfig
from transcreator.errors import ErrorKind, PipelineError
from transcreator.llm_client import OpenAITextGenerator, backoff_delay

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _connection_error():
    return openai.APIConnectionError(request=_REQUEST)


def _rate_limit_error():
    return openai.RateLimitError("slow down", response=httpx.Response(429, request=_REQUEST), body=None)


def _bad_request_error():
    return openai.BadRequestError("bad prompt", response=httpx.Response(400, request=_REQUEST), body=None)


class FakeCompletions:
    """Raises the queued errors in order, then answers."""

    def __init__(self, errors, content='{"translations": []}'):
        self.errors = list(errors)
        self.content = content
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.errors:
            raise self.errors.pop(0)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))])


def _generator(completions, max_retries=3, backoff_ms=1000):
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    config = PipelineConfig(openai_api_key="test", max_retries=max_retries, backoff_ms=backoff_ms)
    return OpenAITextGenerator(config, client=client)


@pytest.fixture
def sleeps(monkeypatch):
    recorded = []

    async def fake_sleep(delay):
        recorded.append(delay)

    monkeypatch.setattr(llm_client.asyncio, "sleep", fake_sleep)
    return recorded


def test_backoff_delay_doubles():
    assert [backoff_delay(a, 1000) for a in (1, 2, 3)] == [1.0, 2.0, 4.0]
    assert backoff_delay(1, 0) == 0.0


def test_transient_errors_are_retried_with_backoff(sleeps):
    completions = FakeCompletions([_connection_error(), _rate_limit_error()], content='{"ok": true}')
    gen = _generator(completions)

    assert asyncio.run(gen.generate("prompt", "gpt-test")) == '{"ok": true}'
    assert len(completions.calls) == 3
    assert sleeps == [1.0, 2.0]
    assert completions.calls[0]["model"] == "gpt-test"
    assert completions.calls[0]["response_format"] == {"type": "json_object"}
    assert completions.calls[0]["messages"][-1] == {"role": "user", "content": "prompt"}


def test_retry_ceiling_raises_backend_unavailable(sleeps):
    completions = FakeCompletions([_connection_error() for _ in range(5)])
    gen = _generator(completions, max_retries=3)

    with pytest.raises(PipelineError) as exc:
        asyncio.run(gen.generate("prompt", "gpt-test"))

    assert exc.value.kind is ErrorKind.BACKEND_UNAVAILABLE
    assert exc.value.status_hint == 503
    assert len(completions.calls) == 3
    assert sleeps == [1.0, 2.0]


def test_single_attempt_fails_without_backoff(sleeps):
    completions = FakeCompletions([_rate_limit_error()])
    gen = _generator(completions, max_retries=1)

    with pytest.raises(PipelineError) as exc:
        asyncio.run(gen.generate("prompt", "gpt-test"))

    assert exc.value.kind is ErrorKind.BACKEND_UNAVAILABLE
    assert exc.value.context["original_error"]
    assert len(completions.calls) == 1
    assert sleeps == []


def test_request_errors_are_not_retried(sleeps):
    completions = FakeCompletions([_bad_request_error()])
    gen = _generator(completions)

    with pytest.raises(PipelineError) as exc:
        asyncio.run(gen.generate("prompt", "gpt-test"))

    assert exc.value.kind is ErrorKind.BACKEND_UNAVAILABLE
    assert len(completions.calls) == 1
    assert sleeps == []


def test_missing_api_key_is_reported():
    with pytest.raises(RuntimeError, match="OPENAI_API_KEY"):
        OpenAITextGenerator(PipelineConfig(openai_api_key=None))


def test_status_reports_health():
    class Models:
        def __init__(self, error=None):
            self.error = error

        async def retrieve(self, model):
            if self.error:
                raise self.error
            return SimpleNamespace(id=model)

    config = PipelineConfig(openai_api_key="test")
    ok = OpenAITextGenerator(config, client=SimpleNamespace(models=Models()))
    down = OpenAITextGenerator(config, client=SimpleNamespace(models=Models(_connection_error())))

    assert asyncio.run(ok.status("gpt-test")).is_healthy
    status = asyncio.run(down.status("gpt-test"))
    assert not status.is_healthy
    assert "Connection error" in status.message
