"""
Completion client for OpenAI via the official Python SDK.

The SDK call is synchronous; it runs in a worker thread so the event loop
stays free while the request is in flight.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import anyio
from openai import OpenAI

from supportbot.models import ConversationTurn

from .base import ModelOptions, ProviderError, non_empty_or_fallback


def _create_client(api_key: str, base_url: Optional[str], timeout: Optional[float]) -> OpenAI:
    try:
        kwargs: Dict[str, Any] = {"api_key": api_key}
        if base_url:
            kwargs["base_url"] = str(base_url)
        if timeout is not None:
            kwargs["timeout"] = timeout
        return OpenAI(**kwargs)
    except Exception as exc:
        raise ProviderError("openai", f"failed to initialise SDK: {exc}") from exc


def build_messages(
    system_prompt: str,
    history: Sequence[ConversationTurn],
    new_message: str,
) -> List[Dict[str, str]]:
    """
    System prompt first, then the stored turns oldest-first, then the new
    user message.
    """
    messages = [{"role": "system", "content": system_prompt}]
    messages.extend({"role": turn.role.value, "content": turn.content} for turn in history)
    messages.append({"role": "user", "content": new_message})
    return messages


def _extract_text(completion: Any) -> Optional[str]:
    choices = getattr(completion, "choices", None)
    if not choices:
        raise ProviderError("openai", "response contained no choices")
    message = getattr(choices[0], "message", None)
    if message is None:
        raise ProviderError("openai", "response choice has no message")
    return getattr(message, "content", None)


class OpenAIProviderClient:
    name = "openai"

    def __init__(
        self,
        *,
        api_key: str,
        options: ModelOptions,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Any = None,
    ) -> None:
        self.options = options
        self._client = client if client is not None else _create_client(api_key, base_url, timeout)

    async def complete(
        self,
        system_prompt: str,
        history: Sequence[ConversationTurn],
        new_message: str,
        options: Optional[ModelOptions] = None,
    ) -> str:
        opts = options or self.options
        messages = build_messages(system_prompt, history, new_message)

        def _call():
            return self._client.chat.completions.create(
                model=opts.model,
                messages=messages,
                max_tokens=opts.max_tokens,
                temperature=opts.temperature,
            )

        try:
            completion = await anyio.to_thread.run_sync(_call, abandon_on_cancel=True)
        except Exception as exc:
            raise ProviderError(self.name, f"chat completion failed: {exc}") from exc

        return non_empty_or_fallback(_extract_text(completion))


__all__ = ["OpenAIProviderClient", "build_messages"]
