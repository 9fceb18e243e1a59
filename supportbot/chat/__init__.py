from .locks import SessionLocks
from .orchestrator import KEYWORD_PROVIDER, NO_PROVIDER, Orchestrator
from .policy import EscalationPolicy, needs_escalation, score_confidence

__all__ = [
    "KEYWORD_PROVIDER",
    "NO_PROVIDER",
    "EscalationPolicy",
    "Orchestrator",
    "SessionLocks",
    "needs_escalation",
    "score_confidence",
]
