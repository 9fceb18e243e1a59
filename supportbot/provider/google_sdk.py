"""
Completion client for Google Gemini via the official google-genai SDK.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import anyio
from google import genai
from google.genai import types

from supportbot.models import ConversationTurn, TurnRole

from .base import ModelOptions, ProviderError, non_empty_or_fallback

# Gemini only knows "user" and "model"; system turns travel as system_instruction.
_ROLE_MAP = {
    TurnRole.USER: "user",
    TurnRole.ASSISTANT: "model",
}


def _create_client(api_key: str) -> genai.Client:
    try:
        return genai.Client(api_key=api_key)
    except Exception as exc:
        raise ProviderError("gemini", f"failed to initialise google-genai: {exc}") from exc


def _append_text(contents: List[Dict[str, Any]], role: str, text: str) -> None:
    if contents and contents[-1]["role"] == role:
        contents[-1]["parts"].append({"text": text})
    else:
        contents.append({"role": role, "parts": [{"text": text}]})


def build_contents(
    history: Sequence[ConversationTurn],
    new_message: str,
) -> List[Dict[str, Any]]:
    """
    Convert stored turns into Gemini `contents`.

    System turns are dropped and consecutive turns of the same role are merged
    into one content with several parts, so user and model strictly alternate.
    A window that starts with a model turn (the older user turn was trimmed)
    loses that leading turn: the conversation must open with the user.
    """
    contents: List[Dict[str, Any]] = []
    for turn in history:
        role = _ROLE_MAP.get(turn.role)
        if role is None:
            continue
        if not contents and role == "model":
            continue
        _append_text(contents, role, turn.content)
    _append_text(contents, "user", new_message)
    return contents


def _extract_text(response: Any) -> Optional[str]:
    if response is None:
        raise ProviderError("gemini", "empty response object")
    try:
        return response.text
    except (AttributeError, ValueError) as exc:
        raise ProviderError("gemini", f"unreadable response: {exc}") from exc


class GeminiProviderClient:
    name = "gemini"

    def __init__(
        self,
        *,
        api_key: str,
        options: ModelOptions,
        client: Any = None,
    ) -> None:
        self.options = options
        self._client = client if client is not None else _create_client(api_key)

    async def complete(
        self,
        system_prompt: str,
        history: Sequence[ConversationTurn],
        new_message: str,
        options: Optional[ModelOptions] = None,
    ) -> str:
        opts = options or self.options
        contents = build_contents(history, new_message)
        config = types.GenerateContentConfig(
            system_instruction=system_prompt,
            max_output_tokens=opts.max_tokens,
            temperature=opts.temperature,
        )

        def _call():
            return self._client.models.generate_content(
                model=opts.model, contents=contents, config=config
            )

        try:
            response = await anyio.to_thread.run_sync(_call, abandon_on_cancel=True)
        except Exception as exc:
            raise ProviderError(self.name, f"generate_content failed: {exc}") from exc

        return non_empty_or_fallback(_extract_text(response))


__all__ = ["GeminiProviderClient", "build_contents"]
