from __future__ import annotations

import json

import httpx
import pytest

from sellerops.llm.client import AssistantClient
from sellerops.llm.heuristic import build_heuristic_response
from sellerops.llm.providers.openai import OpenAIProvider
from sellerops.orchestrator.events import Utterance
from sellerops.persona import SYSTEM_PROMPT


@pytest.fixture
def anyio_backend():
    return "asyncio"


def completion(content: str | None) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def make_client(handler, calls: list[httpx.Request] | None = None) -> AssistantClient:
    def recording(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return handler(request)

    provider = OpenAIProvider(api_key="sk-test", transport=httpx.MockTransport(recording))
    return AssistantClient(provider=provider)


@pytest.mark.anyio("asyncio")
async def test_unconfigured_client_answers_locally() -> None:
    client = AssistantClient(provider=None)
    result = await client.respond_with_source("Plan my Amazon Prime Day listings")
    assert result.source == "heuristic"
    assert result.fallback_reason == "not_configured"
    assert result.response == build_heuristic_response("Plan my Amazon Prime Day listings")


@pytest.mark.anyio("asyncio")
async def test_schema_valid_reply_is_returned_as_is() -> None:
    calls: list[httpx.Request] = []
    content = json.dumps({"reply": "Ship the Diwali bundle first.", "followUps": ["Draft the listing?"]})
    client = make_client(lambda _: httpx.Response(200, json=completion(content)), calls)

    result = await client.respond_with_source("What should I ship first?")

    assert result.source == "model"
    assert result.response.reply == "Ship the Diwali bundle first."
    assert result.response.summary is None
    assert result.response.follow_ups == ["Draft the listing?"]
    assert result.response.to_payload() == {
        "reply": "Ship the Diwali bundle first.",
        "followUps": ["Draft the listing?"],
    }
    assert len(calls) == 1
    await client.aclose()


@pytest.mark.anyio("asyncio")
async def test_request_carries_schema_system_prompt_and_trailing_history() -> None:
    calls: list[httpx.Request] = []
    client = make_client(lambda _: httpx.Response(200, json=completion('{"reply": "ok"}')), calls)
    history = [Utterance.create("user" if i % 2 == 0 else "assistant", f"turn {i}") for i in range(8)]

    await client.respond_with_source("next step?", history)

    body = json.loads(calls[0].content)
    assert calls[0].headers["Authorization"] == "Bearer sk-test"
    assert calls[0].url.path.endswith("/chat/completions")
    assert body["response_format"]["type"] == "json_schema"
    schema = body["response_format"]["json_schema"]["schema"]
    assert schema["required"] == ["reply"]
    assert schema["additionalProperties"] is False
    messages = body["messages"]
    assert messages[0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert [m["content"] for m in messages[1:-1]] == [f"turn {i}" for i in range(2, 8)]
    assert messages[-1] == {"role": "user", "content": "next step?"}
    await client.aclose()


@pytest.mark.anyio("asyncio")
async def test_blank_history_entries_are_dropped() -> None:
    client = AssistantClient(provider=None)
    trimmed = client.trim_history(
        [{"role": "user", "content": "  "}, {"role": "system", "content": "x"}, {"role": "assistant", "content": "hi"}]
    )
    assert trimmed == [{"role": "assistant", "content": "hi"}]


@pytest.mark.parametrize(
    ("handler", "reason"),
    [
        (lambda _: httpx.Response(500, json={"error": "boom"}), "http_status"),
        (lambda _: httpx.Response(200, json={"choices": []}), "empty_content"),
        (lambda _: httpx.Response(200, json=completion(None)), "empty_content"),
        (lambda _: httpx.Response(200, json={"choices": [None]}), "empty_content"),
        (lambda _: httpx.Response(200, json={"choices": [{"message": "oops"}]}), "empty_content"),
        (
            lambda _: httpx.Response(
                200,
                json={"choices": [{"message": {"content": [{"type": "text", "text": '{"reply": "x"}'}]}}]},
            ),
            "empty_content",
        ),
        (lambda _: httpx.Response(200, json={"choices": "none"}), "empty_content"),
        (lambda _: httpx.Response(200, json=completion("not json at all")), "invalid_json"),
        (lambda _: httpx.Response(200, json=completion('{"summary": "no reply"}')), "schema_mismatch"),
        (lambda _: httpx.Response(200, text="<html>gateway</html>"), "transport_error"),
    ],
)
@pytest.mark.anyio("asyncio")
async def test_failures_fall_back_to_heuristic_for_same_message(handler, reason) -> None:
    calls: list[httpx.Request] = []
    client = make_client(handler, calls)
    message = "Update my Flipkart catalog"

    result = await client.respond_with_source(message)

    assert result.source == "heuristic"
    assert result.fallback_reason == reason
    assert result.response == build_heuristic_response(message)
    assert len(calls) == 1
    await client.aclose()


@pytest.mark.anyio("asyncio")
async def test_transport_error_falls_back_without_retry() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler, calls)
    result = await client.respond_with_source("any tasks for today?")

    assert result.fallback_reason == "transport_error"
    assert result.response.summary == "Daily operations plan generated."
    assert len(calls) == 1
    await client.aclose()


class ListContentProvider:
    name = "stub"

    async def complete(self, messages, response_format):
        return [{"type": "text", "text": "hi"}]

    async def aclose(self) -> None:
        return None


@pytest.mark.anyio("asyncio")
async def test_non_text_content_from_provider_is_invalid_json() -> None:
    client = AssistantClient(provider=ListContentProvider())
    result = await client.respond_with_source("new sku sheet")
    assert result.fallback_reason == "invalid_json"
    assert result.response == build_heuristic_response("new sku sheet")
