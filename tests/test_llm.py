from __future__ import annotations

import pytest

from idea_forge.config import AISettings
from idea_forge.errors import (
    ConfigurationError,
    MalformedResponse,
    UpstreamError,
    UpstreamQuotaExhausted,
    UpstreamRateLimited,
)
from idea_forge.llm import PromptSpec, StructuredOutputClient, ToolDefinition
from tests.fakes import FakeOpenAI, status_error, text_response, timeout_error, tool_response

TOOL = ToolDefinition(
    name="return_answer",
    description="Return the answer",
    parameters={
        "type": "object",
        "properties": {"answer": {"type": "string"}},
        "required": ["answer"],
        "additionalProperties": False,
    },
)
SPEC = PromptSpec(system_prompt="  You are terse.  ", user_prompt="What is 6x7?\n", tool=TOOL)


def test_complete_forces_the_tool_and_returns_arguments(
    ai_client: StructuredOutputClient, fake_openai: FakeOpenAI
) -> None:
    fake_openai.queue(tool_response({"answer": "42"}))

    assert ai_client.complete(SPEC) == {"answer": "42"}

    call = fake_openai.calls[0]
    assert call["model"] == "test-model"
    assert call["messages"] == [
        {"role": "system", "content": "You are terse."},
        {"role": "user", "content": "What is 6x7?"},
    ]
    assert call["tools"] == [{"type": "function", "function": {
        "name": "return_answer",
        "description": "Return the answer",
        "parameters": TOOL.parameters,
    }}]
    assert call["tool_choice"] == {"type": "function", "function": {"name": "return_answer"}}


def test_rate_limit_maps_to_upstream_rate_limited(
    ai_client: StructuredOutputClient, fake_openai: FakeOpenAI
) -> None:
    fake_openai.queue(status_error(429))

    with pytest.raises(UpstreamRateLimited) as excinfo:
        ai_client.complete(SPEC)
    assert excinfo.value.status_code == 429
    assert len(fake_openai.calls) == 1


def test_payment_required_maps_to_quota_exhausted(
    ai_client: StructuredOutputClient, fake_openai: FakeOpenAI
) -> None:
    fake_openai.queue(status_error(402))

    with pytest.raises(UpstreamQuotaExhausted):
        ai_client.complete(SPEC)


def test_payment_required_is_generic_when_quota_errors_disabled(
    ai_client: StructuredOutputClient, fake_openai: FakeOpenAI
) -> None:
    fake_openai.queue(status_error(402))

    with pytest.raises(UpstreamError) as excinfo:
        ai_client.complete(SPEC, quota_errors=False)
    assert not isinstance(excinfo.value, UpstreamQuotaExhausted)
    assert excinfo.value.message == "AI gateway error: 402"


@pytest.mark.parametrize("status", [400, 500, 503])
def test_other_statuses_map_to_upstream_error(
    ai_client: StructuredOutputClient, fake_openai: FakeOpenAI, status: int
) -> None:
    fake_openai.queue(status_error(status))

    with pytest.raises(UpstreamError) as excinfo:
        ai_client.complete(SPEC)
    assert excinfo.value.status_code == 500


def test_timeout_maps_to_upstream_error(ai_client: StructuredOutputClient, fake_openai: FakeOpenAI) -> None:
    fake_openai.queue(timeout_error())

    with pytest.raises(UpstreamError, match="timed out"):
        ai_client.complete(SPEC)


@pytest.mark.parametrize(
    "response",
    [
        text_response("Sure! The answer is 42."),
        tool_response(None),
        tool_response(""),
        tool_response("{not json"),
        tool_response("[1, 2, 3]"),
        tool_response({"unrelated": True}),
    ],
    ids=["plain-text", "no-arguments", "empty-arguments", "bad-json", "not-an-object", "missing-key"],
)
def test_malformed_responses(ai_client: StructuredOutputClient, fake_openai: FakeOpenAI, response) -> None:
    fake_openai.queue(response)

    with pytest.raises(MalformedResponse):
        ai_client.complete(SPEC)


def test_missing_key_raises_configuration_error() -> None:
    ai_client = StructuredOutputClient(AISettings(api_key=None))

    with pytest.raises(ConfigurationError):
        ai_client.complete(SPEC)
