"""
Escalation rules: keyword hand-off before any provider call, and a
confidence score on the generated text afterwards.

The score is a textual heuristic (phrase matching plus a length threshold),
not a model-reported signal.
"""

from __future__ import annotations

from typing import Iterable, Tuple

LOW_CONFIDENCE_PHRASES: Tuple[str, ...] = (
    "i don't know",
    "i'm not sure",
    "i can't help",
    "contact support",
    "try again",
    "technical difficulties",
)

LOW_CONFIDENCE = 0.3
DETAILED_CONFIDENCE = 0.8
DEFAULT_CONFIDENCE = 0.6
DETAILED_RESPONSE_MIN_LENGTH = 100
ESCALATION_THRESHOLD = 0.5


def score_confidence(generated_text: str) -> float:
    lowered = generated_text.lower()
    if any(phrase in lowered for phrase in LOW_CONFIDENCE_PHRASES):
        return LOW_CONFIDENCE
    if len(generated_text) > DETAILED_RESPONSE_MIN_LENGTH:
        return DETAILED_CONFIDENCE
    return DEFAULT_CONFIDENCE


def needs_escalation(confidence: float) -> bool:
    return confidence < ESCALATION_THRESHOLD


class EscalationPolicy:
    def __init__(self, keywords: Iterable[str]) -> None:
        # Empty keywords would match every message.
        self.keywords = tuple(k.strip().lower() for k in keywords if k and k.strip())

    def requests_human(self, message: str) -> bool:
        """
        True if the message contains any escalation keyword (case-insensitive
        substring match).
        """
        lowered = message.lower()
        return any(keyword in lowered for keyword in self.keywords)


__all__ = [
    "ESCALATION_THRESHOLD",
    "EscalationPolicy",
    "LOW_CONFIDENCE_PHRASES",
    "needs_escalation",
    "score_confidence",
]
