from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.chat_routes import router as chat_router
from .api.health_routes import router as health_router
from .api.ws_routes import router as ws_router
from .context import AppContext, build_app_context
from .errors import error_payload
from .logging_config import logger
from .redis_client import close_redis_client, get_redis_client
from .settings import Settings, settings as default_settings


async def handle_unexpected_error(request: Request, exc: Exception):
    """
    Global handler: structured 500 body, full traceback only in the logs.
    """
    error_id = uuid.uuid4().hex
    logger.exception(
        "Unhandled error %s %s (error_id=%s)",
        request.method,
        request.url.path,
        error_id,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": error_payload(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                error="internal_error",
                message="Internal server error, please try again later",
                details={"error_id": error_id},
            )
        },
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    """
    Missing or empty required fields are caller errors (400), not 422s.
    """
    fields = sorted(
        {str(err["loc"][-1]) for err in exc.errors() if err.get("loc")}
    )
    message = (
        f"Missing or invalid fields: {', '.join(fields)}" if fields else "Invalid request"
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": error_payload(
                status.HTTP_400_BAD_REQUEST,
                error="invalid_input",
                message=message,
                details={"fields": fields},
            )
        },
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    startup: build the shared context unless one was injected
    shutdown: close the Redis pool we opened
    """
    owns_redis = getattr(app.state, "context", None) is None
    if owns_redis:
        config: Settings = app.state.settings
        app.state.context = build_app_context(config, get_redis_client(config))
        logger.info(
            "Session store at %s (timeout=%ss, history=%s)",
            config.redis_url,
            config.session_timeout,
            config.max_conversation_history,
        )

    yield

    if owns_redis:
        await close_redis_client()


def create_app(
    config: Optional[Settings] = None,
    *,
    context: Optional[AppContext] = None,
) -> FastAPI:
    cfg = context.settings if context is not None else (config or default_settings)

    app = FastAPI(
        title="Support Chat Orchestrator",
        version=cfg.app_version,
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.context = context

    app.add_exception_handler(Exception, handle_unexpected_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.get_cors_origins(),
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(chat_router)
    app.include_router(ws_router)

    return app


__all__ = ["create_app", "handle_unexpected_error", "lifespan"]
