"""
Session identity and conversation history on top of `ExpiringStore`.

Key layout:
- session:<session_id>  JSON Session record, TTL = session timeout
- history:<session_id>  list of JSON turns, newest first, capped length

Store outages never escape this module: reads degrade to absent / empty and
writes become best-effort no-ops, so a chat can continue without context.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from supportbot.logging_config import logger
from supportbot.models import ConversationTurn, Session, utcnow
from supportbot.storage import ExpiringStore, StoreUnavailable

SESSION_KEY_PREFIX = "session:"
SESSION_KEY_TEMPLATE = SESSION_KEY_PREFIX + "{session_id}"
HISTORY_KEY_TEMPLATE = "history:{session_id}"


def session_key(session_id: str) -> str:
    return SESSION_KEY_TEMPLATE.format(session_id=session_id)


def history_key(session_id: str) -> str:
    return HISTORY_KEY_TEMPLATE.format(session_id=session_id)


class SessionRegistry:
    def __init__(
        self,
        store: ExpiringStore,
        *,
        session_timeout: int,
        max_history: int,
    ) -> None:
        if max_history <= 0:
            raise ValueError("max_history must be positive")
        self._store = store
        self.session_timeout = session_timeout
        self.max_history = max_history

    @staticmethod
    def generate_session_id(user_id: str) -> str:
        return f"{user_id}_{uuid.uuid4()}"

    async def _write_session(self, session: Session) -> None:
        await self._store.set(
            session_key(session.session_id),
            session.model_dump_json(by_alias=True),
            ttl_seconds=self.session_timeout,
        )

    async def create_session(
        self,
        session_id: str,
        user_id: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Session:
        """
        Create or refresh a session.

        An existing record keeps its created_at and user_id; metadata is
        merged and both keys get a fresh TTL. History is left untouched.
        The returned Session reflects what was written, or what would have
        been written when the store is down.
        """
        now = utcnow()
        existing = await self.get_session(session_id)
        if existing is not None:
            session = existing.model_copy(
                update={
                    "last_activity": max(now, existing.created_at),
                    "metadata": {**existing.metadata, **(metadata or {})},
                }
            )
        else:
            session = Session(
                session_id=session_id,
                user_id=user_id,
                created_at=now,
                last_activity=now,
                metadata=dict(metadata or {}),
            )

        try:
            await self._write_session(session)
            if existing is not None:
                await self._store.expire(
                    history_key(session_id), ttl_seconds=self.session_timeout
                )
        except StoreUnavailable as exc:
            logger.warning("Error creating session %s: %s", session_id, exc)
        return session

    async def get_session(self, session_id: str) -> Optional[Session]:
        try:
            raw = await self._store.get(session_key(session_id))
        except StoreUnavailable as exc:
            logger.warning("Error getting session %s: %s", session_id, exc)
            return None
        if not raw:
            return None
        try:
            return Session.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding malformed session record for %s", session_id)
            return None

    async def touch_activity(self, session_id: str) -> Optional[Session]:
        """
        Refresh last_activity and the TTL. Returns None for unknown sessions.
        """
        session = await self.get_session(session_id)
        if session is None:
            return None
        updated = session.model_copy(
            update={"last_activity": max(utcnow(), session.created_at)}
        )
        try:
            await self._write_session(updated)
        except StoreUnavailable as exc:
            logger.warning("Error updating session activity %s: %s", session_id, exc)
            return session
        return updated

    async def append_turn(self, session_id: str, turn: ConversationTurn) -> None:
        try:
            await self._store.push_capped(
                history_key(session_id),
                turn.model_dump_json(by_alias=True),
                max_len=self.max_history,
                ttl_seconds=self.session_timeout,
            )
        except StoreUnavailable as exc:
            logger.warning("Error adding message to history %s: %s", session_id, exc)
            return
        await self.touch_activity(session_id)

    async def get_history(self, session_id: str) -> List[ConversationTurn]:
        try:
            raw_items = await self._store.read_list(history_key(session_id))
        except StoreUnavailable as exc:
            logger.warning("Error getting conversation history %s: %s", session_id, exc)
            return []

        turns: List[ConversationTurn] = []
        for raw in raw_items:
            try:
                turns.append(ConversationTurn.model_validate_json(raw))
            except ValidationError:
                logger.warning("Skipping malformed history entry for %s", session_id)
        return turns

    async def clear_session(self, session_id: str) -> None:
        try:
            await self._store.delete(session_key(session_id), history_key(session_id))
        except StoreUnavailable as exc:
            logger.warning("Error clearing session %s: %s", session_id, exc)

    async def count_active_sessions(self) -> int:
        """
        Approximate number of live sessions, for health reporting only.
        """
        try:
            return len(await self._store.keys_matching(SESSION_KEY_PREFIX))
        except StoreUnavailable as exc:
            logger.warning("Error getting active sessions count: %s", exc)
            return 0


__all__ = [
    "SESSION_KEY_TEMPLATE",
    "HISTORY_KEY_TEMPLATE",
    "SessionRegistry",
    "history_key",
    "session_key",
]
