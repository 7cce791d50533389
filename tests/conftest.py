import pytest

from dreamlens.credentials import mapping_secret_resolver
from dreamlens.models import (
    AIModel,
    DreamContext,
    DreamData,
    ModelCapabilities,
    ProviderConfig,
    PsychMethod,
    TaskType,
)
from dreamlens.settings import Settings

API_KEYS = {
    "GEMINI_API_KEY": "gemini-test-key",
    "OPENAI_API_KEY": "openai-test-key",
    "AITUNNEL_API_KEY": "aitunnel-test-key",
    "NEUROAPI_API_KEY": "neuroapi-test-key",
    "CLAUDE_API_KEY": "claude-test-key",
    "CUSTOM_API_KEY": "custom-test-key",
}


@pytest.fixture
def settings():
    """Settings with retries and backoff disabled so failures surface at once."""
    return Settings(
        _env_file=None,
        retry_attempts=1,
        retry_backoff=0,
        retry_max_wait=0,
        request_timeout=5,
    )


@pytest.fixture
def secret_resolver():
    return mapping_secret_resolver(API_KEYS)


@pytest.fixture
def no_secrets():
    return mapping_secret_resolver({})


def make_config(provider_type, **kwargs):
    task = kwargs.pop("task", TaskType.TEXT)
    model_id = kwargs.pop("model_id", f"{provider_type}-model")
    defaults = {
        "id": f"cfg-{provider_type}",
        "provider_type": provider_type,
        "is_active_for_text": task is TaskType.TEXT,
        "is_active_for_images": task is TaskType.IMAGE,
        "default_model_id_for_text": model_id if task is TaskType.TEXT else None,
        "default_model_id_for_images": model_id if task is TaskType.IMAGE else None,
    }
    defaults.update(kwargs)
    return ProviderConfig(**defaults)


def make_model(model_id, provider_type=None, *, image=False, reasoning=False, **kwargs):
    return AIModel(
        id=kwargs.pop("id", model_id),
        provider_type=provider_type,
        model_id=kwargs.pop("upstream_id", model_id),
        capabilities=ModelCapabilities(image=image, reasoning=reasoning),
        **kwargs,
    )


@pytest.fixture
def dream():
    return DreamData(
        description="I was flying over a dark sea towards a lighthouse.",
        context=DreamContext(
            emotion="Anxiety",
            life_situation="Changing jobs",
            associations="Childhood holidays",
            recurring=True,
            day_residue="Watched a documentary about the ocean",
            character_type="Strangers",
            dream_role="Participant",
            physical_sensation="Cold hands",
        ),
        method=PsychMethod.JUNGIAN,
    )


@pytest.fixture
def analysis_payload():
    return {
        "summary": "A flight towards guidance.",
        "symbolism": [
            {"name": "Sea", "meaning": "The unconscious."},
            {"name": "Lighthouse", "meaning": "A guiding insight."},
        ],
        "analysis": "### Overview\nThe dreamer seeks direction.",
        "advice": ["Keep a journal."],
        "questions": ["What are you steering towards?"],
    }


class FakeProvider:
    """Adapter stand-in recording calls."""

    def __init__(self, config, model, analysis=None, image="data:image/png;base64,AAAA"):
        self.config = config
        self.model = model
        self.analysis = analysis
        self.image = image
        self.analyze_calls = 0
        self.image_calls = 0
        self.closed = False

    async def analyze_dream(self, dream):
        self.analyze_calls += 1
        if isinstance(self.analysis, Exception):
            raise self.analysis
        return self.analysis

    async def generate_image(self, prompt):
        self.image_calls += 1
        if isinstance(self.image, Exception):
            raise self.image
        return self.image

    async def close(self):
        self.closed = True


class FakeFactory:
    """Factory stand-in building ``FakeProvider`` instances."""

    def __init__(self, **provider_kwargs):
        self.provider_kwargs = provider_kwargs
        self.created = []

    def create(self, config, model):
        provider = FakeProvider(config, model, **self.provider_kwargs)
        self.created.append(provider)
        return provider


@pytest.fixture
def config_factory():
    return make_config


@pytest.fixture
def model_factory():
    return make_model


@pytest.fixture
def fake_factory():
    return FakeFactory
