from __future__ import annotations

from fastapi import APIRouter, Depends

from supportbot.context import AppContext
from supportbot.deps import get_app_context
from supportbot.models import utcnow
from supportbot.provider import provider_status
from supportbot.schemas import HealthResponse, ServiceHealth

router = APIRouter(tags=["health"], prefix="/api/v1")


@router.get("/health", response_model=HealthResponse)
async def health_endpoint(
    context: AppContext = Depends(get_app_context),
) -> HealthResponse:
    """
    Liveness plus dependency overview. A Redis outage is reported in the
    payload and never turns into an error status.
    """
    redis_ok = await context.store.is_available()
    active_sessions = await context.registry.count_active_sessions() if redis_ok else 0
    labels = provider_status(context.providers).as_labels()

    return HealthResponse(
        timestamp=utcnow(),
        services=ServiceHealth(
            redis="connected" if redis_ok else "disconnected",
            openai=labels["openai"],
            gemini=labels["gemini"],
            active_sessions=active_sessions,
        ),
        version=context.settings.app_version,
        environment=context.settings.environment,
    )


__all__ = ["router"]
