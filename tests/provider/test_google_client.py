from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from supportbot.models import ConversationTurn, TurnRole
from supportbot.provider import (
    EMPTY_COMPLETION_FALLBACK,
    GeminiProviderClient,
    ModelOptions,
    ProviderError,
)
from supportbot.provider.google_sdk import build_contents


class FakeModels:
    def __init__(self, response: Any = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


class BlockedResponse:
    @property
    def text(self):
        raise ValueError("response was blocked by safety filters")


def _client(models: FakeModels) -> GeminiProviderClient:
    return GeminiProviderClient(
        api_key="g-test",
        options=ModelOptions(model="gemini-1.5-flash", max_tokens=500, temperature=0.7),
        client=SimpleNamespace(models=models),
    )


def test_build_contents_maps_roles_and_drops_system_turns():
    history = [
        ConversationTurn(role=TurnRole.SYSTEM, content="ignored"),
        ConversationTurn(role=TurnRole.USER, content="hi"),
        ConversationTurn(role=TurnRole.ASSISTANT, content="hello"),
    ]

    contents = build_contents(history, "help me")

    assert contents == [
        {"role": "user", "parts": [{"text": "hi"}]},
        {"role": "model", "parts": [{"text": "hello"}]},
        {"role": "user", "parts": [{"text": "help me"}]},
    ]


def test_build_contents_merges_consecutive_turns_of_one_role():
    # Keyword escalation stores only the assistant reply, so model turns can repeat.
    history = [
        ConversationTurn(role=TurnRole.USER, content="hi"),
        ConversationTurn(role=TurnRole.ASSISTANT, content="Hello!"),
        ConversationTurn(role=TurnRole.ASSISTANT, content="Connecting you with an agent."),
        ConversationTurn(role=TurnRole.USER, content="still there?"),
    ]

    contents = build_contents(history, "hello?")

    assert contents == [
        {"role": "user", "parts": [{"text": "hi"}]},
        {"role": "model", "parts": [{"text": "Hello!"}, {"text": "Connecting you with an agent."}]},
        {"role": "user", "parts": [{"text": "still there?"}, {"text": "hello?"}]},
    ]


def test_build_contents_starts_with_a_user_turn():
    history = [
        ConversationTurn(role=TurnRole.ASSISTANT, content="answer to a trimmed question"),
        ConversationTurn(role=TurnRole.USER, content="thanks"),
        ConversationTurn(role=TurnRole.ASSISTANT, content="you're welcome"),
    ]

    contents = build_contents(history, "one more thing")

    assert [c["role"] for c in contents] == ["user", "model", "user"]
    assert contents[0]["parts"] == [{"text": "thanks"}]


@pytest.mark.asyncio
async def test_complete_passes_system_instruction_and_limits():
    models = FakeModels(response=SimpleNamespace(text="Sure thing."))
    client = _client(models)

    text = await client.complete("be helpful", [], "Hello")

    assert text == "Sure thing."
    call = models.calls[0]
    assert call["model"] == "gemini-1.5-flash"
    assert call["contents"][-1] == {"role": "user", "parts": [{"text": "Hello"}]}
    config = call["config"]
    assert config.system_instruction == "be helpful"
    assert config.max_output_tokens == 500
    assert config.temperature == 0.7


@pytest.mark.asyncio
async def test_empty_text_becomes_fallback():
    client = _client(FakeModels(response=SimpleNamespace(text="")))

    assert await client.complete("s", [], "m") == EMPTY_COMPLETION_FALLBACK


@pytest.mark.asyncio
async def test_unreadable_response_is_a_provider_error():
    client = _client(FakeModels(response=BlockedResponse()))

    with pytest.raises(ProviderError) as exc_info:
        await client.complete("s", [], "m")
    assert exc_info.value.provider == "gemini"


@pytest.mark.asyncio
async def test_sdk_exception_is_wrapped():
    client = _client(FakeModels(error=RuntimeError("quota exceeded")))

    with pytest.raises(ProviderError) as exc_info:
        await client.complete("s", [], "m")
    assert "quota exceeded" in str(exc_info.value)
