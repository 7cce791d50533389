"""Shared plumbing for provider adapters.

Adapters own their wire protocol; this base only handles what every one of
them needs: API-key resolution, effective generation parameters, bounded
and retried upstream calls, and translation of vendor exceptions into the
``dreamlens.errors`` taxonomy. Prompting, JSON repair and normalization are
free functions in ``dreamlens.prompts`` and ``dreamlens.normalizer``.
"""

from __future__ import annotations

import abc
import asyncio
import base64
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..credentials import SecretResolver, env_secret_resolver
from ..errors import (
    RETRYABLE_ERRORS,
    AIProviderError,
    AnalysisError,
    AuthenticationError,
    ImageGenerationError,
    RateLimitError,
    UnsupportedCapabilityError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from ..i18n import tr
from ..models import (
    AIModel,
    AnalysisResponse,
    DreamData,
    GenerationParams,
    ProviderConfig,
    TaskType,
    effective_generation,
)
from ..settings import Settings, get_settings
from ..utils.logging import RequestContext

T = TypeVar("T")


def upstream_status(exc: BaseException) -> int | None:
    """Best-effort HTTP status of a vendor SDK exception.

    openai/anthropic expose ``status_code``; google-api-core exposes ``code``.
    """
    for attr in ("status_code", "code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool) and 100 <= value <= 599:
            return value
    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def to_data_url(data: bytes | str, mime_type: str = "image/png") -> str:
    """Encode image bytes (or an already base64 string) as a data URL."""
    if isinstance(data, bytes):
        encoded = base64.b64encode(data).decode("ascii")
    else:
        encoded = data
    return f"data:{mime_type};base64,{encoded}"


class BaseDreamProvider(abc.ABC):
    """Abstract base class for dream-analysis provider adapters."""

    #: Vendor exception types that mean "the request timed out".
    timeout_errors: tuple[type[BaseException], ...] = ()
    #: Adapters that may be built without a key (validated on first call) set this False.
    requires_api_key_at_init: bool = True

    def __init__(
        self,
        config: ProviderConfig,
        model: AIModel,
        *,
        settings: Settings | None = None,
        secret_resolver: SecretResolver | None = None,
    ):
        self.config = config
        self.model = model
        self.settings = settings or get_settings()
        self.lang = self.settings.language
        self._resolve_secret = secret_resolver or env_secret_resolver
        self.api_key = self._resolve_secret(config.api_key_env_name)
        self.log = logging.getLogger(f"dreamlens.providers.{config.provider_type}")

        if self.requires_api_key_at_init:
            self.require_api_key()

    @property
    def provider_name(self) -> str:
        return self.config.provider_name

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} provider={self.config.provider_type!r} "
            f"model={self.model.model_id!r}>"
        )

    def require_api_key(self) -> str:
        """Return the API key or raise before any request is attempted."""
        if not self.api_key:
            self.api_key = self._resolve_secret(self.config.api_key_env_name)
        if not self.api_key:
            raise AuthenticationError(
                tr(
                    self.lang,
                    "ERR_API_KEY_MISSING",
                    provider=self.provider_name,
                    env_name=self.config.api_key_env_name,
                ),
                provider=self.provider_name,
                env_name=self.config.api_key_env_name,
            )
        return self.api_key

    def generation_params(self) -> GenerationParams:
        return effective_generation(self.config, self.model)

    def request_context(self, operation: str, **extra: Any) -> RequestContext:
        return RequestContext(
            logger=self.log,
            operation=operation,
            provider=self.config.provider_type,
            model=self.model.model_id,
            **extra,
        )

    def unsupported_image(self, *, model_level: bool = False) -> UnsupportedCapabilityError:
        key = "ERR_IMAGE_MODEL_UNSUPPORTED" if model_level else "ERR_IMAGE_PROVIDER_UNSUPPORTED"
        return UnsupportedCapabilityError(
            tr(self.lang, key, provider=self.provider_name, model=self.model.model_name),
            provider=self.provider_name,
            capability="image",
        )

    @abc.abstractmethod
    async def analyze_dream(self, dream: DreamData) -> AnalysisResponse:
        pass

    @abc.abstractmethod
    async def generate_image(self, prompt: str) -> str:
        pass

    async def close(self) -> None:
        return None

    # --- Upstream calls ---

    def translate_error(self, exc: BaseException, task: TaskType) -> AIProviderError:
        """Map a vendor/transport exception onto the error taxonomy."""
        name = self.provider_name
        if isinstance(exc, (asyncio.TimeoutError, httpx.TimeoutException, *self.timeout_errors)):
            return UpstreamTimeoutError(
                tr(
                    self.lang,
                    "ERR_UPSTREAM_TIMEOUT",
                    provider=name,
                    timeout=self.settings.request_timeout,
                ),
                provider=name,
            )

        status = upstream_status(exc)
        if status in (401, 403) or (status == 400 and "api key" in str(exc).lower()):
            env_name = self.config.api_key_env_name
            return AuthenticationError(
                tr(self.lang, "ERR_AUTH_REJECTED", provider=name, env_name=env_name),
                provider=name,
                env_name=env_name,
            )
        if status == 429:
            return RateLimitError(
                tr(self.lang, "ERR_RATE_LIMIT", provider=name),
                provider=name,
                status_code=status,
            )
        if status is not None and status >= 500:
            return UpstreamUnavailableError(
                tr(self.lang, "ERR_UPSTREAM_UNAVAILABLE", provider=name),
                provider=name,
                status_code=status,
            )

        detail = str(exc) or type(exc).__name__
        if task is TaskType.IMAGE:
            return ImageGenerationError(
                tr(self.lang, "ERR_IMAGE_FAILED", provider=name, detail=detail), provider=name
            )
        return AnalysisError(
            tr(self.lang, "ERR_ANALYSIS_FAILED", provider=name, detail=detail), provider=name
        )

    async def _call_once(
        self, task: TaskType, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        try:
            return await asyncio.wait_for(
                func(*args, **kwargs), timeout=self.settings.request_timeout
            )
        except AIProviderError:
            raise
        except Exception as exc:
            translated = self.translate_error(exc, task)
            self.log.warning(
                "%s call failed: %s: %s", self.provider_name, type(exc).__name__, exc
            )
            raise translated from exc

    async def call_upstream(
        self, task: TaskType, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        """Await one upstream call with a timeout, retrying rate limits and 5xx."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.settings.retry_attempts),
            wait=wait_exponential(
                multiplier=self.settings.retry_backoff, max=self.settings.retry_max_wait
            ),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=before_sleep_log(self.log, logging.WARNING),
            reraise=True,
        )
        return await retrying(self._call_once, task, func, *args, **kwargs)
