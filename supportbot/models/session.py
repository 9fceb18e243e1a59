from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class CamelModel(BaseModel):
    """
    Base for records that travel as JSON: camelCase on the wire and in Redis,
    snake_case attributes in Python.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TurnRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ConversationTurn(CamelModel):
    """
    One role-tagged message of a conversation.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    role: TurnRole = Field(..., description="Who produced the message")
    content: str = Field(..., description="Message text")
    timestamp: dt.datetime = Field(default_factory=utcnow)


class Session(CamelModel):
    """
    A single user's ongoing conversation context.
    """

    session_id: str = Field(..., description="Globally unique id, '<userId>_<token>'")
    user_id: str = Field(..., description="Owner of the conversation")
    created_at: dt.datetime = Field(..., description="Creation time (UTC)")
    last_activity: dt.datetime = Field(..., description="Last history append (UTC)")
    metadata: Dict[str, Any] = Field(default_factory=dict)


__all__ = ["CamelModel", "ConversationTurn", "Session", "TurnRole", "utcnow"]
