"""Error taxonomy for the provider layer.

Adapters translate vendor SDK exceptions into these kinds; the selection
service passes them through untouched, so callers see one error surface
whichever adapter produced it. ``message`` is already localized.
"""

from __future__ import annotations


class AIProviderError(Exception):
    """Base class for every failure raised by the provider layer."""

    def __init__(self, message: str, *, provider: str | None = None):
        super().__init__(message)
        self.message = message
        self.provider = provider


class ConfigurationError(AIProviderError):
    """No usable provider/model configuration for the requested task."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        task: str | None = None,
    ):
        super().__init__(message, provider=provider)
        self.task = task


class ConfigStoreError(ConfigurationError):
    """The configuration store itself could not be queried."""


class AuthenticationError(AIProviderError):
    """Missing or rejected API key."""

    def __init__(self, message: str, *, provider: str | None = None, env_name: str = ""):
        super().__init__(message, provider=provider)
        self.env_name = env_name


class UpstreamError(AIProviderError):
    """Transport-level failure reported by (or while reaching) the vendor."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message, provider=provider)
        self.status_code = status_code


class RateLimitError(UpstreamError):
    pass


class UpstreamUnavailableError(UpstreamError):
    pass


class UpstreamTimeoutError(UpstreamError):
    pass


class UnsupportedCapabilityError(AIProviderError):
    def __init__(
        self, message: str, *, provider: str | None = None, capability: str = "image"
    ):
        super().__init__(message, provider=provider)
        self.capability = capability


class ResponseFormatError(AIProviderError):
    """The vendor replied, but not with a usable analysis."""


class MalformedResponseError(ResponseFormatError):
    """The reply could not be parsed as JSON, even after repair."""


class InvalidResponseShapeError(ResponseFormatError):
    """The reply parsed, but does not match the canonical analysis shape."""


class AnalysisError(AIProviderError):
    """Generic dream-analysis failure."""


class ImageGenerationError(AIProviderError):
    """Generic image-generation failure."""


#: Failures worth retrying transparently.
RETRYABLE_ERRORS: tuple[type[AIProviderError], ...] = (
    RateLimitError,
    UpstreamUnavailableError,
)
