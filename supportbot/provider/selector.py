"""
Which completion backends are active, and in what order they are tried.

OpenAI is the primary and Gemini the secondary. A backend is active only
when its API key is configured; adding a vendor means adding an entry here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence

from supportbot.logging_config import logger
from supportbot.settings import Settings, is_configured_key

from .base import ModelOptions, ProviderClient, ProviderError
from .google_sdk import GeminiProviderClient
from .openai_sdk import OpenAIProviderClient

PROVIDER_ORDER = ("openai", "gemini")


@dataclass(frozen=True)
class ProviderStatus:
    openai: bool
    gemini: bool
    preferred: str

    def as_labels(self) -> Dict[str, str]:
        return {
            name: "configured" if getattr(self, name) else "not configured"
            for name in PROVIDER_ORDER
        }


def _build_openai(config: Settings) -> OpenAIProviderClient:
    return OpenAIProviderClient(
        api_key=config.openai_api_key or "",
        base_url=config.openai_base_url,
        timeout=config.provider_timeout,
        options=ModelOptions(
            model=config.openai_model,
            max_tokens=config.openai_max_tokens,
            temperature=config.openai_temperature,
        ),
    )


def _build_gemini(config: Settings) -> GeminiProviderClient:
    return GeminiProviderClient(
        api_key=config.gemini_api_key or "",
        options=ModelOptions(
            model=config.gemini_model,
            max_tokens=config.gemini_max_tokens,
            temperature=config.gemini_temperature,
        ),
    )


def build_provider_chain(config: Settings) -> List[ProviderClient]:
    """
    Instantiate every configured backend in preference order.

    A backend whose SDK cannot be initialised is logged and left out rather
    than failing startup.
    """
    chain: List[ProviderClient] = []
    builders = (
        (config.openai_api_key, _build_openai),
        (config.gemini_api_key, _build_gemini),
    )
    for api_key, builder in builders:
        if not is_configured_key(api_key):
            continue
        try:
            client = builder(config)
        except ProviderError as exc:
            logger.warning("Failed to initialise provider: %s", exc)
            continue
        logger.info("%s provider initialised (model=%s)", client.name, client.options.model)
        chain.append(client)

    if not chain:
        logger.error(
            "No AI providers available; configure OPENAI_API_KEY or GEMINI_API_KEY"
        )
    elif len(chain) > 1:
        logger.info(
            "Multiple providers available, fallback order: %s",
            " -> ".join(c.name for c in chain),
        )
    return chain


def preferred_mode(chain: Sequence[ProviderClient]) -> str:
    if len(chain) > 1:
        return "auto"
    if chain:
        return chain[0].name
    return "none"


def provider_status(chain: Sequence[ProviderClient]) -> ProviderStatus:
    names = {client.name for client in chain}
    return ProviderStatus(
        openai="openai" in names,
        gemini="gemini" in names,
        preferred=preferred_mode(chain),
    )


__all__ = [
    "PROVIDER_ORDER",
    "ProviderStatus",
    "build_provider_chain",
    "preferred_mode",
    "provider_status",
]
