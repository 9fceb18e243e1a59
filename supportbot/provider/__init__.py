from .base import (
    EMPTY_COMPLETION_FALLBACK,
    ModelOptions,
    ProviderClient,
    ProviderError,
)
from .google_sdk import GeminiProviderClient
from .openai_sdk import OpenAIProviderClient
from .selector import ProviderStatus, build_provider_chain, provider_status

__all__ = [
    "EMPTY_COMPLETION_FALLBACK",
    "GeminiProviderClient",
    "ModelOptions",
    "OpenAIProviderClient",
    "ProviderClient",
    "ProviderError",
    "ProviderStatus",
    "build_provider_chain",
    "provider_status",
]
