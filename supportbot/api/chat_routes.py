from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response

from supportbot.chat import Orchestrator
from supportbot.deps import get_orchestrator, get_registry
from supportbot.errors import internal_error, not_found
from supportbot.logging_config import logger
from supportbot.schemas import (
    CreateSessionRequest,
    CreateSessionResponse,
    HistoryResponse,
    SendMessageRequest,
    SendMessageResponse,
    SessionSummary,
)
from supportbot.sessions import SessionRegistry

router = APIRouter(tags=["chat"], prefix="/api/v1/chat")


@router.post("/session", response_model=CreateSessionResponse)
async def create_session_endpoint(
    payload: CreateSessionRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> CreateSessionResponse:
    """
    Start a new conversation for a user.
    """
    session_id = registry.generate_session_id(payload.user_id)
    session = await registry.create_session(session_id, payload.user_id, payload.metadata)
    logger.info("Session created: %s (user=%s)", session_id, payload.user_id)
    return CreateSessionResponse(
        session_id=session.session_id,
        user_id=session.user_id,
        created_at=session.created_at,
    )


@router.post("/message", response_model=SendMessageResponse)
async def send_message_endpoint(
    payload: SendMessageRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> SendMessageResponse:
    try:
        result = await orchestrator.process_message(
            payload.session_id, payload.message, payload.user_id
        )
    except Exception:
        logger.exception("Error processing message for session %s", payload.session_id)
        raise internal_error("Failed to process message")

    return SendMessageResponse(
        response=result.message,
        needs_escalation=result.needs_escalation,
        timestamp=result.timestamp,
        confidence=result.confidence,
        provider=result.provider,
    )


@router.get("/history/{session_id}", response_model=HistoryResponse)
async def get_history_endpoint(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> HistoryResponse:
    """
    Return the stored turns (oldest first) together with session metadata.
    """
    session = await registry.get_session(session_id)
    if session is None:
        raise not_found("Session not found")
    history = await registry.get_history(session_id)
    return HistoryResponse(
        history=history,
        session_data=SessionSummary(
            session_id=session.session_id,
            user_id=session.user_id,
            created_at=session.created_at,
            last_activity=session.last_activity,
        ),
    )


@router.delete("/session/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def clear_session_endpoint(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> Response:
    """
    Drop a session and its history. Clearing an unknown session is a no-op.
    """
    await registry.clear_session(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
