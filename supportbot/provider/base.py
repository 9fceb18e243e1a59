"""
Uniform completion capability shared by every backend.

Concrete clients (OpenAI, Gemini) satisfy `ProviderClient` structurally;
they are picked by configuration in `supportbot.provider.selector`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, runtime_checkable

from supportbot.models import ConversationTurn

# Returned in place of an empty completion; never propagate an empty success.
EMPTY_COMPLETION_FALLBACK = (
    "I'm sorry, I couldn't process your request. Please try again."
)


class ProviderError(Exception):
    """A completion backend failed, timed out or returned something unusable."""

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        super().__init__(f"{provider}: {message}")


@dataclass(frozen=True)
class ModelOptions:
    model: str
    max_tokens: int = 500
    temperature: float = 0.7


@runtime_checkable
class ProviderClient(Protocol):
    name: str
    options: ModelOptions

    async def complete(
        self,
        system_prompt: str,
        history: Sequence[ConversationTurn],
        new_message: str,
        options: Optional[ModelOptions] = None,
    ) -> str:
        ...


def non_empty_or_fallback(text: Optional[str]) -> str:
    if text is None or not text.strip():
        return EMPTY_COMPLETION_FALLBACK
    return text


__all__ = [
    "EMPTY_COMPLETION_FALLBACK",
    "ModelOptions",
    "ProviderClient",
    "ProviderError",
    "non_empty_or_fallback",
]
