from __future__ import annotations

import datetime as dt

from pydantic import Field

from .session import CamelModel


class ChatResponse(CamelModel):
    """
    Outcome of one orchestration cycle. Derived per call and never stored;
    only the turns it produced are persisted.
    """

    message: str
    timestamp: dt.datetime
    needs_escalation: bool
    confidence: float = Field(..., ge=0.0, le=1.0)
    provider: str = Field(
        ..., description="Backend that produced the text, or the keyword / none path"
    )


__all__ = ["ChatResponse"]
