"""Provider selection service.

Resolves the operator-configured active provider and model for a task,
builds the adapter through the factory and caches it per task with a
freshness window. Adapter errors pass through unchanged.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import NamedTuple

from ..core.protocols import IDreamProvider, IProviderConfigStore
from ..credentials import SecretResolver
from ..errors import AIProviderError, ConfigurationError
from ..i18n import tr
from ..models import (
    ActiveProviderInfo,
    AIModel,
    AnalysisResponse,
    ConnectionTestResult,
    DreamData,
    ProviderConfig,
    TaskType,
)
from ..prompts import connection_test_dream
from ..providers.factory import ProviderFactory
from ..settings import Settings, get_settings
from ..utils.logging import RequestContext

log = logging.getLogger("dreamlens.services.ai")


class _CachedProvider(NamedTuple):
    """One cache slot; replaced as a whole, never mutated."""

    provider: IDreamProvider
    config: ProviderConfig
    model: AIModel
    loaded_at: float


class AIService:
    """Selects, caches and delegates to the active provider per task."""

    def __init__(
        self,
        store: IProviderConfigStore,
        *,
        factory: ProviderFactory | None = None,
        settings: Settings | None = None,
        secret_resolver: SecretResolver | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self.factory = factory or ProviderFactory(self.settings, secret_resolver)
        self.lang = self.settings.language
        self.cache_ttl = self.settings.provider_cache_ttl
        self._clock = clock

        self._slots: dict[TaskType, _CachedProvider | None] = {task: None for task in TaskType}
        # One lock per task so an image reload never blocks the text path.
        self._locks: dict[TaskType, asyncio.Lock] = {task: asyncio.Lock() for task in TaskType}
        # Replaced adapters, closed once request_timeout has passed.
        self._retired: set[IDreamProvider] = set()
        self._close_tasks: set[asyncio.Task[None]] = set()

    def _fresh_slot(self, task: TaskType) -> _CachedProvider | None:
        slot = self._slots[task]
        if slot is not None and self._clock() - slot.loaded_at < self.cache_ttl:
            return slot
        return None

    async def _load_active(self, task: TaskType) -> tuple[ProviderConfig, AIModel]:
        configs = await self.store.list_active_configs(task)
        if not configs:
            raise ConfigurationError(
                tr(self.lang, "ERR_NO_ACTIVE_PROVIDER", task=task.value), task=task.value
            )
        if len(configs) > 1:
            log.warning(
                "%s providers are active for task '%s'; using %s",
                len(configs),
                task.value,
                configs[0].provider_name,
            )
        config = configs[0]

        model_id = config.default_model_id_for(task)
        if not model_id:
            raise ConfigurationError(
                tr(
                    self.lang,
                    "ERR_NO_DEFAULT_MODEL",
                    provider=config.provider_name,
                    task=task.value,
                ),
                provider=config.provider_name,
                task=task.value,
            )

        model = await self.store.get_model(model_id)
        if model is None:
            raise ConfigurationError(
                tr(
                    self.lang,
                    "ERR_MODEL_NOT_FOUND",
                    model_id=model_id,
                    provider=config.provider_name,
                    task=task.value,
                ),
                provider=config.provider_name,
                task=task.value,
            )

        if model.provider_type and model.provider_type != config.provider_type:
            raise ConfigurationError(
                tr(
                    self.lang,
                    "ERR_MODEL_PROVIDER_MISMATCH",
                    model=model.model_name,
                    model_type=model.provider_type,
                    provider=config.provider_name,
                    provider_type=config.provider_type,
                ),
                provider=config.provider_name,
                task=task.value,
            )
        return config, model

    async def _get_slot(self, task: TaskType) -> _CachedProvider:
        task = TaskType(task)
        slot = self._fresh_slot(task)
        if slot is not None:
            return slot

        async with self._locks[task]:
            # Another caller may have reloaded while we waited.
            slot = self._fresh_slot(task)
            if slot is not None:
                return slot

            config, model = await self._load_active(task)
            provider = self.factory.create(config, model)
            stale = self._slots[task]
            slot = _CachedProvider(provider, config, model, self._clock())
            self._slots[task] = slot
            if stale is not None and stale.provider is not provider:
                self._retire(stale.provider)
            log.info(
                "Loaded %s provider %s with model %s",
                task.value,
                config.provider_name,
                model.model_id,
            )
        return slot

    async def get_provider(self, task: TaskType = TaskType.TEXT) -> IDreamProvider:
        """Return the adapter for ``task``, reusing it within the freshness window.

        Raises:
            ConfigurationError: no active provider, no default model, missing
                model row, or a model bound to a different provider type.
            AuthenticationError: the adapter needs a key that is not set.
        """
        return (await self._get_slot(task)).provider

    async def analyze_dream(self, dream: DreamData) -> AnalysisResponse:
        async with RequestContext(logger=log, task=TaskType.TEXT.value) as ctx:
            provider = await self.get_provider(TaskType.TEXT)
            ctx.debug("Delegating analysis", provider=provider.config.provider_name)
            return await provider.analyze_dream(dream)

    async def generate_image(self, prompt: str) -> str:
        async with RequestContext(logger=log, task=TaskType.IMAGE.value) as ctx:
            provider = await self.get_provider(TaskType.IMAGE)
            ctx.debug("Delegating image generation", provider=provider.config.provider_name)
            return await provider.generate_image(prompt)

    def clear_cache(self, task: TaskType | None = None) -> None:
        """Drop the cached adapter for ``task`` (both tasks when None)."""
        tasks = list(TaskType) if task is None else [TaskType(task)]
        for cleared in tasks:
            slot = self._slots[cleared]
            self._slots[cleared] = None
            if slot is not None:
                self._retire(slot.provider)
        log.info("Provider cache cleared for %s", ", ".join(t.value for t in tasks))

    async def get_active_provider_info(
        self, task: TaskType = TaskType.TEXT
    ) -> ActiveProviderInfo | None:
        try:
            slot = await self._get_slot(task)
        except AIProviderError as exc:
            log.warning("No usable %s provider: %s", TaskType(task).value, exc)
            return None
        return ActiveProviderInfo(task=TaskType(task), config=slot.config, model=slot.model)

    async def test_connection(self, task: TaskType = TaskType.TEXT) -> ConnectionTestResult:
        """Probe the provider for ``task`` with a tiny analysis request.

        Diagnostic only: every failure is reported in the result rather than raised.
        """
        started = time.perf_counter()
        provider_name = model_id = None
        try:
            slot = await self._get_slot(task)
            provider_name = slot.config.provider_name
            model_id = slot.model.model_id
            await slot.provider.analyze_dream(connection_test_dream(self.lang))
        except Exception as exc:
            log.warning("Connection test for %s failed: %s", TaskType(task).value, exc)
            message = getattr(exc, "message", None) or str(exc)
            return ConnectionTestResult(
                success=False,
                message=message or tr(self.lang, "TEST_CONNECTION_FAILED"),
                provider=provider_name,
                model=model_id,
                elapsed_ms=(time.perf_counter() - started) * 1000,
            )

        return ConnectionTestResult(
            success=True,
            message=tr(self.lang, "TEST_CONNECTION_OK", provider=provider_name),
            provider=provider_name,
            model=model_id,
            elapsed_ms=(time.perf_counter() - started) * 1000,
        )

    async def _close_quietly(self, provider: IDreamProvider) -> None:
        try:
            await provider.close()
        except Exception as exc:
            log.debug("Error closing %r: %s", provider, exc)

    def _retire(self, provider: IDreamProvider) -> None:
        self._retired.add(provider)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: close() releases it.
            return
        close_task = loop.create_task(self._close_later(provider))
        self._close_tasks.add(close_task)
        close_task.add_done_callback(self._close_tasks.discard)

    async def _close_later(self, provider: IDreamProvider) -> None:
        await asyncio.sleep(self.settings.request_timeout)
        if provider in self._retired:
            self._retired.discard(provider)
            await self._close_quietly(provider)

    async def close(self) -> None:
        """Close every adapter this service created and the config store."""
        self.clear_cache()
        pending = list(self._close_tasks)
        for close_task in pending:
            close_task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

        retired, self._retired = self._retired, set()
        for provider in retired:
            await self._close_quietly(provider)

        close_store = getattr(self.store, "close", None)
        if close_store is not None:
            await close_store()
