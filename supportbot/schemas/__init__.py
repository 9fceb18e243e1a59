from .chat import (
    CreateSessionRequest,
    CreateSessionResponse,
    HealthResponse,
    HistoryResponse,
    SendMessageRequest,
    SendMessageResponse,
    ServiceHealth,
    SessionSummary,
)

__all__ = [
    "CreateSessionRequest",
    "CreateSessionResponse",
    "HealthResponse",
    "HistoryResponse",
    "SendMessageRequest",
    "SendMessageResponse",
    "ServiceHealth",
    "SessionSummary",
]
