"""DreamLens - AI provider layer for dream analysis and visualization.

One service selects the operator-configured provider per task (text
analysis or image generation) and hides three upstream APIs (Google
Gemini, OpenAI-compatible endpoints, Anthropic Claude) behind a single
adapter interface.
"""

from __future__ import annotations

from .bootstrap import create_ai_service
from .errors import (
    AIProviderError,
    AnalysisError,
    AuthenticationError,
    ConfigurationError,
    ImageGenerationError,
    RateLimitError,
    UnsupportedCapabilityError,
)
from .models import (
    AIModel,
    AnalysisResponse,
    DreamContext,
    DreamData,
    DreamSymbol,
    ProviderConfig,
    PsychMethod,
    TaskType,
)
from .services import AIService
from .settings import Settings

__version__ = "0.1.0"

__all__ = [
    "AIModel",
    "AIProviderError",
    "AIService",
    "AnalysisError",
    "AnalysisResponse",
    "AuthenticationError",
    "ConfigurationError",
    "DreamContext",
    "DreamData",
    "DreamSymbol",
    "ImageGenerationError",
    "ProviderConfig",
    "PsychMethod",
    "RateLimitError",
    "Settings",
    "TaskType",
    "UnsupportedCapabilityError",
    "create_ai_service",
]
