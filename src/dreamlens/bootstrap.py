"""Composition root: build an ``AIService`` from settings."""

from __future__ import annotations

import logging

from .core.protocols import IProviderConfigStore
from .credentials import SecretResolver
from .errors import ConfigurationError
from .i18n import tr
from .services.ai_service import AIService
from .services.config_store import InMemoryConfigStore, SupabaseConfigStore
from .settings import Settings, get_settings

log = logging.getLogger("dreamlens.bootstrap")


def create_config_store(settings: Settings) -> IProviderConfigStore:
    if settings.supabase_url:
        log.info("Using Supabase configuration store at %s", settings.supabase_url)
        return SupabaseConfigStore(
            settings.supabase_url,
            settings.supabase_key,
            timeout=settings.connect_timeout,
            lang=settings.language,
        )
    if settings.providers_file:
        return InMemoryConfigStore.from_json_file(settings.providers_file, settings.language)
    raise ConfigurationError(
        tr(
            settings.language,
            "ERR_STORE_UNAVAILABLE",
            detail="set DREAMLENS_SUPABASE_URL or DREAMLENS_PROVIDERS_FILE",
        )
    )


def create_ai_service(
    settings: Settings | None = None,
    *,
    secret_resolver: SecretResolver | None = None,
) -> AIService:
    settings = settings or get_settings()
    return AIService(
        create_config_store(settings),
        settings=settings,
        secret_resolver=secret_resolver,
    )
