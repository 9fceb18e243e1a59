"""
Central coordinator for one inbound chat message.

Flow per call (serialized per session id):
  history fetch -> keyword escalation -> provider attempts in order
  -> confidence score -> persist user + assistant turns -> ChatResponse

Provider failures of any kind, including timeouts, move on to the next
provider; when none succeeds a fixed technical-difficulty reply is returned
and history is left as it was.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import anyio

from supportbot.logging_config import logger
from supportbot.models import ChatResponse, ConversationTurn, TurnRole, utcnow
from supportbot.provider import ProviderClient
from supportbot.sessions import SessionRegistry

from .locks import SessionLocks
from .policy import EscalationPolicy, needs_escalation, score_confidence
from .prompts import ESCALATION_MESSAGE, SYSTEM_PROMPT, TECHNICAL_DIFFICULTY_MESSAGE

# Provider label used when no backend is configured.
KEYWORD_PROVIDER = "keyword"
NO_PROVIDER = "none"


@dataclass(frozen=True)
class Completion:
    text: str
    provider: str


class Orchestrator:
    def __init__(
        self,
        registry: SessionRegistry,
        providers: Sequence[ProviderClient],
        policy: EscalationPolicy,
        *,
        provider_timeout: float,
        system_prompt: str = SYSTEM_PROMPT,
        locks: Optional[SessionLocks] = None,
    ) -> None:
        self._registry = registry
        self._providers: List[ProviderClient] = list(providers)
        self._policy = policy
        self._provider_timeout = provider_timeout
        self._system_prompt = system_prompt
        self._locks = locks if locks is not None else SessionLocks()

    @property
    def providers(self) -> List[ProviderClient]:
        return list(self._providers)

    def _preferred_provider(self, default: str) -> str:
        return self._providers[0].name if self._providers else default

    async def process_message(
        self, session_id: str, user_message: str, user_id: str
    ) -> ChatResponse:
        async with self._locks.hold(session_id):
            return await self._process(session_id, user_message, user_id)

    async def _process(
        self, session_id: str, user_message: str, user_id: str
    ) -> ChatResponse:
        timestamp = utcnow()
        history = await self._registry.get_history(session_id)

        if self._policy.requests_human(user_message):
            logger.info("Escalation keyword matched for session %s", session_id)
            await self._ensure_session(session_id, user_id)
            await self._registry.append_turn(
                session_id,
                ConversationTurn(
                    role=TurnRole.ASSISTANT, content=ESCALATION_MESSAGE, timestamp=timestamp
                ),
            )
            return ChatResponse(
                message=ESCALATION_MESSAGE,
                timestamp=timestamp,
                needs_escalation=True,
                confidence=1.0,
                provider=self._preferred_provider(KEYWORD_PROVIDER),
            )

        completion = await self._complete_with_fallback(session_id, history, user_message)
        if completion is None:
            return ChatResponse(
                message=TECHNICAL_DIFFICULTY_MESSAGE,
                timestamp=timestamp,
                needs_escalation=True,
                confidence=0.0,
                provider=self._preferred_provider(NO_PROVIDER),
            )

        confidence = score_confidence(completion.text)

        await self._ensure_session(session_id, user_id)
        await self._registry.append_turn(
            session_id,
            ConversationTurn(role=TurnRole.USER, content=user_message, timestamp=timestamp),
        )
        await self._registry.append_turn(
            session_id,
            ConversationTurn(
                role=TurnRole.ASSISTANT, content=completion.text, timestamp=timestamp
            ),
        )

        return ChatResponse(
            message=completion.text,
            timestamp=timestamp,
            needs_escalation=needs_escalation(confidence),
            confidence=confidence,
            provider=completion.provider,
        )

    async def _complete_with_fallback(
        self,
        session_id: str,
        history: Sequence[ConversationTurn],
        user_message: str,
    ) -> Optional[Completion]:
        """
        Try each configured provider once, in order. Returns None when every
        attempt failed or nothing is configured.
        """
        if not self._providers:
            logger.error("No AI providers configured; session %s gets fallback reply", session_id)
            return None

        for provider in self._providers:
            try:
                with anyio.fail_after(self._provider_timeout):
                    text = await provider.complete(self._system_prompt, history, user_message)
            except TimeoutError:
                logger.warning(
                    "Provider %s timed out after %.1fs (session=%s)",
                    provider.name,
                    self._provider_timeout,
                    session_id,
                )
                continue
            except Exception as exc:
                logger.warning(
                    "Provider %s failed (session=%s): %s", provider.name, session_id, exc
                )
                continue
            return Completion(text=text, provider=provider.name)

        logger.error("All AI providers failed for session %s", session_id)
        return None

    async def _ensure_session(self, session_id: str, user_id: str) -> None:
        # Messages may arrive for ids that were never created or have expired.
        if await self._registry.get_session(session_id) is None:
            await self._registry.create_session(session_id, user_id, {})


__all__ = [
    "KEYWORD_PROVIDER",
    "NO_PROVIDER",
    "Completion",
    "Orchestrator",
]
