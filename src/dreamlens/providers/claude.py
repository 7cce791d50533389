"""Adapter for the Anthropic Claude messages API (text only)."""

from __future__ import annotations

from typing import Any

from anthropic import APITimeoutError, AsyncAnthropic

from ..errors import MalformedResponseError
from ..i18n import tr
from ..models import AnalysisResponse, DreamData, TaskType
from ..normalizer import normalize_analysis, parse_model_json
from ..prompts import ANALYST_SYSTEM_INSTRUCTION, build_analysis_prompt, language_line
from .base import BaseDreamProvider


def message_text(message: Any) -> str:
    """Concatenate the text blocks of a Claude reply."""
    blocks = getattr(message, "content", None) or []
    return "".join(
        getattr(block, "text", "") or ""
        for block in blocks
        if getattr(block, "type", None) == "text"
    )


class ClaudeProvider(BaseDreamProvider):
    """Client for the Anthropic Claude API."""

    timeout_errors = (APITimeoutError,)

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.client = AsyncAnthropic(
            api_key=self.api_key,
            base_url=self.config.base_url or None,
            timeout=self.settings.request_timeout,
            max_retries=0,
        )
        self.log.info("Initialized %s with model %s", self.provider_name, self.model.model_id)

    async def analyze_dream(self, dream: DreamData) -> AnalysisResponse:
        params = self.generation_params()

        async with self.request_context("analyze") as ctx:
            ctx.info("Starting dream analysis")
            message = await self.call_upstream(
                TaskType.TEXT,
                self.client.messages.create,
                model=self.model.model_id,
                max_tokens=params.max_tokens,
                temperature=params.temperature,
                system=f"{ANALYST_SYSTEM_INSTRUCTION} {language_line(self.lang)}",
                messages=[{"role": "user", "content": build_analysis_prompt(dream, self.lang)}],
            )

            text = message_text(message)
            if not text:
                raise MalformedResponseError(
                    tr(self.lang, "ERR_EMPTY_RESPONSE", provider=self.provider_name),
                    provider=self.provider_name,
                )

            payload = parse_model_json(text, provider=self.provider_name, lang=self.lang)
            result = normalize_analysis(payload, provider=self.provider_name, lang=self.lang)
            ctx.info("Analysis completed", elapsed_ms=round(ctx.elapsed_ms))
            return result

    async def generate_image(self, prompt: str) -> str:
        raise self.unsupported_image()

    async def close(self) -> None:
        await self.client.close()
