"""Map a stored provider-type tag onto its adapter.

OpenAI, AiTunnel, NeuroAPI and custom endpoints share one OpenAI-compatible
adapter; they differ only in base URL.
"""

from __future__ import annotations

from enum import Enum

from ..credentials import SecretResolver, env_secret_resolver
from ..errors import ConfigurationError
from ..i18n import LANG_EN, tr
from ..models import AIModel, ProviderConfig, ProviderType
from ..settings import Settings, get_settings
from .base import BaseDreamProvider
from .claude import ClaudeProvider
from .gemini import GeminiProvider
from .openai_compat import OpenAICompatibleProvider


class ProviderFamily(str, Enum):
    """Wire protocols the adapters implement."""

    GEMINI = "gemini"
    OPENAI_COMPATIBLE = "openai_compatible"
    CLAUDE = "claude"


PROVIDER_FAMILIES: dict[ProviderType, ProviderFamily] = {
    ProviderType.GEMINI: ProviderFamily.GEMINI,
    ProviderType.OPENAI: ProviderFamily.OPENAI_COMPATIBLE,
    ProviderType.AITUNNEL: ProviderFamily.OPENAI_COMPATIBLE,
    ProviderType.NEUROAPI: ProviderFamily.OPENAI_COMPATIBLE,
    ProviderType.CUSTOM: ProviderFamily.OPENAI_COMPATIBLE,
    ProviderType.CLAUDE: ProviderFamily.CLAUDE,
}

ADAPTERS: dict[ProviderFamily, type[BaseDreamProvider]] = {
    ProviderFamily.GEMINI: GeminiProvider,
    ProviderFamily.OPENAI_COMPATIBLE: OpenAICompatibleProvider,
    ProviderFamily.CLAUDE: ClaudeProvider,
}


def supported_provider_types() -> list[str]:
    """Provider-type tags accepted by the factory, in declaration order."""
    return [provider_type.value for provider_type in ProviderType]


def is_supported(provider_type: str) -> bool:
    return (provider_type or "").strip().lower() in supported_provider_types()


def resolve_family(provider_type: str, lang: str = LANG_EN) -> ProviderFamily:
    try:
        return PROVIDER_FAMILIES[ProviderType((provider_type or "").strip().lower())]
    except ValueError:
        raise ConfigurationError(
            tr(
                lang,
                "ERR_UNKNOWN_PROVIDER_TYPE",
                provider_type=provider_type,
                supported=", ".join(supported_provider_types()),
            )
        ) from None


def get_adapter_class(provider_type: str, lang: str = LANG_EN) -> type[BaseDreamProvider]:
    return ADAPTERS[resolve_family(provider_type, lang)]


def create_provider(
    config: ProviderConfig,
    model: AIModel,
    *,
    settings: Settings | None = None,
    secret_resolver: SecretResolver | None = None,
) -> BaseDreamProvider:
    """Instantiate the adapter for ``config.provider_type``.

    Raises:
        ConfigurationError: unknown provider type (the message lists the
            supported set) or incomplete configuration.
        AuthenticationError: the adapter requires a key at construction
            and none is set.
    """
    settings = settings or get_settings()
    adapter_cls = get_adapter_class(config.provider_type, settings.language)
    return adapter_cls(
        config,
        model,
        settings=settings,
        secret_resolver=secret_resolver or env_secret_resolver,
    )


class ProviderFactory:
    """Factory bound to one settings object and secret resolver.

    The selection service holds an instance so tests can substitute a fake.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        secret_resolver: SecretResolver | None = None,
    ):
        self.settings = settings or get_settings()
        self.secret_resolver = secret_resolver or env_secret_resolver

    def create(self, config: ProviderConfig, model: AIModel) -> BaseDreamProvider:
        return create_provider(
            config, model, settings=self.settings, secret_resolver=self.secret_resolver
        )

    supported_provider_types = staticmethod(supported_provider_types)
    is_supported = staticmethod(is_supported)
