from dealflow.config import Settings, get_settings
from dealflow.models.task import ProviderName
from dealflow.providers.base import (
    MalformedResponse,
    ProviderAdapter,
    ProviderError,
    ProviderUnavailable,
    UnsupportedCapability,
)
from dealflow.providers.gemini_adapter import GeminiAdapter
from dealflow.providers.openai_adapter import OpenAIAdapter
from dealflow.utils.circuit_breaker import get_provider_circuit

__all__ = [
    "ProviderAdapter",
    "ProviderError",
    "ProviderUnavailable",
    "MalformedResponse",
    "UnsupportedCapability",
    "OpenAIAdapter",
    "GeminiAdapter",
    "build_adapters",
]


def build_adapters(settings: Settings | None = None) -> dict[ProviderName, ProviderAdapter]:
    """
    Create one adapter per provider from settings.

    Credentials are read here, once. When circuit breaking is enabled each
    provider gets its own circuit; unparsable answers don't trip it.
    """
    settings = settings or get_settings()

    def circuit(provider: ProviderName):
        if not settings.circuit_breaker_enabled:
            return None
        return get_provider_circuit(provider.value, excluded_exceptions=(MalformedResponse,))

    return {
        ProviderName.OPENAI: OpenAIAdapter(
            api_key=settings.openai_api_key,
            default_model=settings.openai_default_model,
            circuit=circuit(ProviderName.OPENAI),
        ),
        ProviderName.GEMINI: GeminiAdapter(
            api_key=settings.gemini_api_key,
            default_model=settings.gemini_default_model,
            circuit=circuit(ProviderName.GEMINI),
        ),
    }
