"""
Services shared by every request, built once at startup and stored on
`app.state.context`. Route handlers reach them via `supportbot.deps`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from redis.asyncio import Redis

from .chat import EscalationPolicy, Orchestrator, SessionLocks
from .provider import ProviderClient, build_provider_chain
from .realtime import ConnectionManager
from .sessions import SessionRegistry
from .settings import Settings
from .storage import ExpiringStore


@dataclass
class AppContext:
    settings: Settings
    store: ExpiringStore
    registry: SessionRegistry
    orchestrator: Orchestrator
    providers: List[ProviderClient]
    locks: SessionLocks
    connections: ConnectionManager = field(default_factory=ConnectionManager)


def build_app_context(
    config: Settings,
    redis: Redis,
    *,
    providers: Optional[Sequence[ProviderClient]] = None,
) -> AppContext:
    """
    Wire store -> registry -> orchestrator. The orchestrator and the WebSocket
    join handler share one `SessionLocks`. `providers` defaults to the
    chain derived from configuration.
    """
    locks = SessionLocks()
    chain = list(providers) if providers is not None else build_provider_chain(config)
    store = ExpiringStore(redis, default_ttl=config.session_timeout)
    registry = SessionRegistry(
        store,
        session_timeout=config.session_timeout,
        max_history=config.max_conversation_history,
    )
    orchestrator = Orchestrator(
        registry,
        chain,
        EscalationPolicy(config.get_escalation_keywords()),
        provider_timeout=config.provider_timeout,
        locks=locks,
    )
    return AppContext(
        settings=config,
        store=store,
        registry=registry,
        orchestrator=orchestrator,
        providers=chain,
        locks=locks,
    )


__all__ = ["AppContext", "build_app_context"]
