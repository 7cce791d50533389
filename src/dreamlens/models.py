"""Domain models for DreamLens with Pydantic validation.

Provider/model rows come from the configuration store, dream input comes
from the application, and ``AnalysisResponse`` is the canonical shape every
adapter must return.
"""

from __future__ import annotations

import uuid
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ProviderType(str, Enum):
    GEMINI = "gemini"
    OPENAI = "openai"
    AITUNNEL = "aitunnel"
    NEUROAPI = "neuroapi"
    CLAUDE = "claude"
    CUSTOM = "custom"


class TaskType(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class PsychMethod(str, Enum):
    AUTO = "auto"
    JUNGIAN = "jungian"
    FREUDIAN = "freudian"
    GESTALT = "gestalt"
    COGNITIVE = "cognitive"
    EXISTENTIAL = "existential"


PROVIDER_DISPLAY_NAMES: dict[str, str] = {
    ProviderType.GEMINI.value: "Google Gemini",
    ProviderType.OPENAI.value: "OpenAI",
    ProviderType.AITUNNEL.value: "AiTunnel",
    ProviderType.NEUROAPI.value: "NeuroAPI",
    ProviderType.CLAUDE.value: "Claude",
    ProviderType.CUSTOM.value: "Custom",
}

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4096
DEFAULT_TOP_P = 1.0


class GenerationParams(BaseModel):
    """Sampling defaults stored on a provider configuration."""

    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, gt=0)
    top_p: float = Field(default=DEFAULT_TOP_P, gt=0.0, le=1.0)

    model_config = ConfigDict(extra="ignore")


class ProviderConfig(BaseModel):
    """Operator-defined connection profile for one upstream vendor.

    ``provider_type`` is kept as a plain string: an unknown tag must reach
    the provider factory so it can report the supported set.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    provider_type: str = Field(min_length=1)
    provider_name: str = ""
    base_url: str | None = None
    api_key_env_name: str = ""
    generation: GenerationParams = Field(default_factory=GenerationParams)
    is_active_for_text: bool = False
    is_active_for_images: bool = False
    default_model_id_for_text: str | None = None
    default_model_id_for_images: str | None = None

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="after")
    def _fill_defaults(self) -> ProviderConfig:
        self.provider_type = self.provider_type.strip().lower()
        if not self.provider_name:
            self.provider_name = PROVIDER_DISPLAY_NAMES.get(
                self.provider_type, self.provider_type.title()
            )
        if not self.api_key_env_name:
            self.api_key_env_name = f"{self.provider_type.upper()}_API_KEY"
        return self

    def is_active_for(self, task: TaskType) -> bool:
        if task is TaskType.IMAGE:
            return self.is_active_for_images
        return self.is_active_for_text

    def default_model_id_for(self, task: TaskType) -> str | None:
        if task is TaskType.IMAGE:
            return self.default_model_id_for_images
        return self.default_model_id_for_text


class ModelCapabilities(BaseModel):
    image: bool = False
    reasoning: bool = False


class ModelPricing(BaseModel):
    """Cost per 1M tokens."""

    input: float = Field(default=0.0, ge=0.0)
    output: float = Field(default=0.0, ge=0.0)
    currency: str = "USD"


class ModelPerformance(BaseModel):
    speed: str | None = None
    intelligence: str | None = None


class ModelOverrides(BaseModel):
    """Per-model generation overrides; image fields apply to image models."""

    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, gt=0)
    size: str | None = None
    quality: str | None = None

    model_config = ConfigDict(extra="ignore")


class AIModel(BaseModel):
    """One selectable model exposed by a provider."""

    id: str
    provider_type: str | None = None
    model_name: str = ""
    model_id: str = Field(min_length=1)
    capabilities: ModelCapabilities = Field(default_factory=ModelCapabilities)
    context_window: int | None = Field(default=None, ge=0)
    pricing: ModelPricing = Field(default_factory=ModelPricing)
    performance: ModelPerformance = Field(default_factory=ModelPerformance)
    overrides: ModelOverrides = Field(default_factory=ModelOverrides)

    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    @model_validator(mode="after")
    def _fill_defaults(self) -> AIModel:
        if self.provider_type:
            self.provider_type = self.provider_type.strip().lower()
        if not self.model_name:
            self.model_name = self.model_id
        return self


def effective_generation(config: ProviderConfig, model: AIModel) -> GenerationParams:
    """Merge provider defaults with the model's overrides (model wins)."""
    overrides = model.overrides
    return GenerationParams(
        temperature=(
            overrides.temperature
            if overrides.temperature is not None
            else config.generation.temperature
        ),
        max_tokens=overrides.max_tokens or config.generation.max_tokens,
        top_p=config.generation.top_p,
    )


class DreamContext(BaseModel):
    """Structured context the dreamer supplies alongside the description."""

    emotion: str = ""
    life_situation: str = ""
    associations: str = ""
    recurring: bool = False
    day_residue: str = ""
    character_type: str = ""
    dream_role: str = ""
    physical_sensation: str = ""


class DreamData(BaseModel):
    description: str = Field(min_length=1)
    context: DreamContext = Field(default_factory=DreamContext)
    method: PsychMethod = PsychMethod.AUTO


class DreamSymbol(BaseModel):
    name: str = Field(min_length=1)
    meaning: str = Field(min_length=1)


class AnalysisResponse(BaseModel):
    """Canonical analysis every adapter produces."""

    summary: str = Field(min_length=1)
    symbolism: list[DreamSymbol] = Field(default_factory=list)
    analysis: str = Field(min_length=1)
    advice: list[str] = Field(default_factory=list)
    questions: list[str] = Field(default_factory=list)


class ConnectionTestResult(BaseModel):
    success: bool
    message: str
    provider: str | None = None
    model: str | None = None
    elapsed_ms: float | None = Field(default=None, ge=0.0)


class ActiveProviderInfo(BaseModel):
    task: TaskType
    config: ProviderConfig
    model: AIModel
