import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from dreamlens.errors import MalformedResponseError, UnsupportedCapabilityError
from dreamlens.providers.claude import ClaudeProvider, message_text


def message(*texts):
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=text) for text in texts])


@pytest.fixture
def provider(config_factory, model_factory, settings, secret_resolver):
    provider = ClaudeProvider(
        config_factory("claude"),
        model_factory("claude-sonnet-4"),
        settings=settings,
        secret_resolver=secret_resolver,
    )
    provider.client = MagicMock()
    provider.client.messages.create = AsyncMock()
    provider.client.close = AsyncMock()
    return provider


class TestClaudeProvider:
    @pytest.mark.asyncio
    async def test_analyze_dream(self, provider, dream, analysis_payload):
        provider.client.messages.create.return_value = message(json.dumps(analysis_payload))

        result = await provider.analyze_dream(dream)

        assert result.summary == analysis_payload["summary"]
        kwargs = provider.client.messages.create.await_args.kwargs
        assert kwargs["model"] == "claude-sonnet-4"
        assert kwargs["max_tokens"] == 4096
        assert "Language of the answer: English." in kwargs["system"]
        assert kwargs["messages"][0]["role"] == "user"

    @pytest.mark.asyncio
    async def test_text_blocks_are_joined(self, provider, dream, analysis_payload):
        raw = json.dumps(analysis_payload)
        provider.client.messages.create.return_value = message(raw[:20], raw[20:])

        result = await provider.analyze_dream(dream)

        assert result.questions == analysis_payload["questions"]

    @pytest.mark.asyncio
    async def test_empty_reply(self, provider, dream):
        provider.client.messages.create.return_value = SimpleNamespace(content=[])

        with pytest.raises(MalformedResponseError) as exc_info:
            await provider.analyze_dream(dream)
        assert exc_info.value.provider == "Claude"

    @pytest.mark.asyncio
    async def test_generate_image_unsupported(self, provider):
        with pytest.raises(UnsupportedCapabilityError) as exc_info:
            await provider.generate_image("sea")

        assert "Claude" in exc_info.value.message
        provider.client.messages.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_close(self, provider):
        await provider.close()
        provider.client.close.assert_awaited_once()


def test_message_text_skips_non_text_blocks():
    reply = SimpleNamespace(
        content=[
            SimpleNamespace(type="thinking", thinking="hmm"),
            SimpleNamespace(type="text", text='{"a": 1}'),
        ]
    )
    assert message_text(reply) == '{"a": 1}'


def test_satisfies_provider_protocol(provider):
    from dreamlens.core.protocols import IDreamProvider

    assert isinstance(provider, IDreamProvider)
