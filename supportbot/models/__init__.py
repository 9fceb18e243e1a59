from .chat import ChatResponse
from .session import CamelModel, ConversationTurn, Session, TurnRole, utcnow

__all__ = [
    "CamelModel",
    "ChatResponse",
    "ConversationTurn",
    "Session",
    "TurnRole",
    "utcnow",
]
