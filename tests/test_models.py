import pytest
from pydantic import ValidationError

from dreamlens.models import (
    AIModel,
    AnalysisResponse,
    DreamData,
    GenerationParams,
    ModelOverrides,
    ProviderConfig,
    TaskType,
    effective_generation,
)


class TestProviderConfig:
    def test_defaults_are_derived_from_type(self):
        config = ProviderConfig(provider_type=" AiTunnel ")
        assert config.provider_type == "aitunnel"
        assert config.provider_name == "AiTunnel"
        assert config.api_key_env_name == "AITUNNEL_API_KEY"
        assert config.generation == GenerationParams()

    def test_unknown_type_is_kept(self):
        config = ProviderConfig(provider_type="mystery")
        assert config.provider_type == "mystery"
        assert config.provider_name == "Mystery"

    def test_task_helpers(self):
        config = ProviderConfig(
            provider_type="gemini",
            is_active_for_text=True,
            default_model_id_for_text="m-text",
            default_model_id_for_images="m-image",
        )
        assert config.is_active_for(TaskType.TEXT)
        assert not config.is_active_for(TaskType.IMAGE)
        assert config.default_model_id_for(TaskType.TEXT) == "m-text"
        assert config.default_model_id_for(TaskType.IMAGE) == "m-image"

    def test_explicit_values_win(self):
        config = ProviderConfig(
            provider_type="custom",
            provider_name="Local vLLM",
            api_key_env_name="VLLM_KEY",
        )
        assert config.provider_name == "Local vLLM"
        assert config.api_key_env_name == "VLLM_KEY"


class TestAIModel:
    def test_model_name_defaults_to_model_id(self):
        model = AIModel(id="1", model_id="gpt-4o")
        assert model.model_name == "gpt-4o"
        assert model.capabilities.image is False

    def test_requires_model_id(self):
        with pytest.raises(ValidationError):
            AIModel(id="1", model_id="")


class TestEffectiveGeneration:
    def test_model_overrides_win(self):
        config = ProviderConfig(
            provider_type="openai",
            generation=GenerationParams(temperature=0.9, max_tokens=1000, top_p=0.8),
        )
        model = AIModel(
            id="1", model_id="gpt-4o", overrides=ModelOverrides(temperature=0.2, max_tokens=500)
        )
        params = effective_generation(config, model)
        assert params.temperature == 0.2
        assert params.max_tokens == 500
        assert params.top_p == 0.8

    def test_zero_temperature_override_is_respected(self):
        config = ProviderConfig(provider_type="openai")
        model = AIModel(id="1", model_id="gpt-4o", overrides=ModelOverrides(temperature=0.0))
        assert effective_generation(config, model).temperature == 0.0

    def test_provider_defaults_without_overrides(self):
        config = ProviderConfig(provider_type="openai")
        model = AIModel(id="1", model_id="gpt-4o")
        assert effective_generation(config, model) == GenerationParams()


def test_dream_description_is_required():
    with pytest.raises(ValidationError):
        DreamData(description="")


def test_analysis_response_requires_summary():
    with pytest.raises(ValidationError):
        AnalysisResponse(summary="", analysis="text")
