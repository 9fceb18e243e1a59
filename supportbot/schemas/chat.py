from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List

from pydantic import Field

from supportbot.models import CamelModel, ConversationTurn


class CreateSessionRequest(CamelModel):
    user_id: str = Field(..., min_length=1, description="Owner of the new session")
    metadata: Dict[str, Any] = Field(default_factory=dict)


class CreateSessionResponse(CamelModel):
    success: bool = True
    session_id: str
    user_id: str
    created_at: dt.datetime


class SendMessageRequest(CamelModel):
    session_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)


class SendMessageResponse(CamelModel):
    success: bool = True
    response: str
    needs_escalation: bool
    timestamp: dt.datetime
    confidence: float
    provider: str


class SessionSummary(CamelModel):
    session_id: str
    user_id: str
    created_at: dt.datetime
    last_activity: dt.datetime


class HistoryResponse(CamelModel):
    success: bool = True
    history: List[ConversationTurn] = Field(default_factory=list)
    session_data: SessionSummary


class ServiceHealth(CamelModel):
    redis: str
    openai: str
    gemini: str
    active_sessions: int


class HealthResponse(CamelModel):
    status: str = "healthy"
    timestamp: dt.datetime
    services: ServiceHealth
    version: str
    environment: str
