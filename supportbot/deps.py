from fastapi import Depends
from starlette.requests import HTTPConnection

from .chat import Orchestrator
from .context import AppContext
from .sessions import SessionRegistry


def get_app_context(conn: HTTPConnection) -> AppContext:
    """
    FastAPI dependency returning the context built at startup.

    Works for both HTTP requests and WebSocket connections. Tests install
    their own context (in-memory Redis, stub providers) via create_app.
    """
    return conn.app.state.context


def get_registry(context: AppContext = Depends(get_app_context)) -> SessionRegistry:
    return context.registry


def get_orchestrator(context: AppContext = Depends(get_app_context)) -> Orchestrator:
    return context.orchestrator
