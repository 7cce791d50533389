from .base import BaseDreamProvider
from .claude import ClaudeProvider
from .factory import (
    ProviderFactory,
    ProviderFamily,
    create_provider,
    is_supported,
    supported_provider_types,
)
from .gemini import GeminiProvider
from .openai_compat import OpenAICompatibleProvider

__all__ = [
    "BaseDreamProvider",
    "ClaudeProvider",
    "GeminiProvider",
    "OpenAICompatibleProvider",
    "ProviderFactory",
    "ProviderFamily",
    "create_provider",
    "is_supported",
    "supported_provider_types",
]
