"""
Tests for the chat-completions client, using httpx.MockTransport in place of
the provider.
"""

import json

import httpx
import pytest

from obogen.config import Settings
from obogen.exceptions import ConfigurationError, GenerationError
from obogen.generator import DeckGenerator, build_messages


DECK_TEXT = "Title: Planets\n\nQ: What is the closest planet to the sun? | A: Mercury\n"


def _settings(**overrides) -> Settings:
    values = {
        "openai_api_key": "sk-test",
        "openai_model": "gpt-test",
        "openai_base_url": "https://llm.example/v1/",
        "request_timeout": 12.5,
    }
    values.update(overrides)
    return Settings(**values)


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def _completion(content) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def test_build_messages_mentions_topic_age_and_count():
    system, user = build_messages("Solar System", "6-8", 12)

    assert system["role"] == "system"
    assert "Title: <topic>" in system["content"]
    assert "Q: <question> | A: <answer>" in system["content"]
    assert 'exactly 12 question/answer pairs about "Solar System"' in system["content"]
    assert "ages 6-8" in system["content"]
    assert user == {
        "role": "user",
        "content": 'Generate a 12-card flashcard deck about "Solar System" for ages 6-8.',
    }


def test_generate_success_sends_expected_request():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        seen["timeout"] = request.extensions["timeout"]
        return httpx.Response(200, json=_completion(DECK_TEXT))

    text = DeckGenerator(_settings(), client=_client(handler)).generate("Planets", "8-10", 1)

    assert text == DECK_TEXT
    assert seen["url"] == "https://llm.example/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["model"] == "gpt-test"
    assert seen["body"]["temperature"] == 0.7
    assert [m["role"] for m in seen["body"]["messages"]] == ["system", "user"]
    assert seen["timeout"]["read"] == 12.5


def test_generate_error_carries_status_and_provider_message():
    def handler(request):
        return httpx.Response(401, json={"error": {"message": "Incorrect API key provided"}})

    with pytest.raises(GenerationError) as excinfo:
        DeckGenerator(_settings(), client=_client(handler)).generate("T", "8-10", 3)

    assert excinfo.value.status_code == 401
    assert "API error (401): Incorrect API key provided" in str(excinfo.value)


def test_generate_error_without_json_body():
    def handler(request):
        return httpx.Response(502, text="<html>Bad gateway</html>")

    with pytest.raises(GenerationError, match=r"API error \(502\): HTTP 502") as excinfo:
        DeckGenerator(_settings(), client=_client(handler)).generate("T", "8-10", 3)

    assert excinfo.value.status_code == 502


@pytest.mark.parametrize(
    "body",
    [
        {"choices": []},
        {"nothing": "here"},
        {"choices": [{"message": {}}]},
        {"choices": [{"message": {"content": None}}]},
        {"choices": [{"message": {"content": "   "}}]},
        ["not", "an", "object"],
    ],
)
def test_generate_rejects_unusable_bodies(body):
    def handler(request):
        return httpx.Response(200, json=body)

    with pytest.raises(GenerationError) as excinfo:
        DeckGenerator(_settings(), client=_client(handler)).generate("T", "8-10", 3)

    assert excinfo.value.status_code is None


def test_generate_rejects_invalid_json():
    def handler(request):
        return httpx.Response(200, text="not json")

    with pytest.raises(GenerationError, match="invalid JSON"):
        DeckGenerator(_settings(), client=_client(handler)).generate("T", "8-10", 3)


def test_generate_timeout_is_generation_error():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(GenerationError, match="timed out after 12.5s"):
        DeckGenerator(_settings(), client=_client(handler)).generate("T", "8-10", 3)


def test_generate_connect_error_is_generation_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GenerationError, match="Request failed"):
        DeckGenerator(_settings(), client=_client(handler)).generate("T", "8-10", 3)


def test_generate_without_key_makes_no_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=_completion(DECK_TEXT))

    with pytest.raises(ConfigurationError):
        DeckGenerator(_settings(openai_api_key=None), client=_client(handler)).generate("T", "8-10", 3)

    assert calls == []
