"""Google Gemini adapter.

Analysis runs in two stages to stay clear of output truncation:

1. one structured request for summary, analysis, advice, questions and the
   *names* of the key symbols;
2. one request per symbol name, issued concurrently, each asking for a long
   interpretation of that symbol alone. A failed symbol gets a placeholder
   meaning instead of failing the analysis.
"""

from __future__ import annotations

import asyncio
from typing import Any

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from ..errors import ImageGenerationError, InvalidResponseShapeError
from ..i18n import tr
from ..models import AnalysisResponse, DreamData, DreamSymbol, TaskType
from ..normalizer import normalize_analysis, parse_model_json
from ..prompts import (
    STAGE1_SCHEMA,
    STAGE1_SYSTEM_INSTRUCTION,
    SYMBOL_SCHEMA,
    SYMBOL_SYSTEM_INSTRUCTION,
    build_image_prompt,
    build_stage1_prompt,
    build_symbol_prompt,
)
from ..utils.logging import RequestContext
from .base import BaseDreamProvider, to_data_url


def response_text(response: Any) -> str:
    """Text of a generateContent reply ("" when the reply carries none)."""
    try:
        return response.text or ""
    except ValueError:
        # Raised by the SDK when the candidate was blocked or has no text part.
        return ""


def response_parts(response: Any) -> list[Any]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    content = getattr(candidates[0], "content", None)
    return list(getattr(content, "parts", None) or [])


def _clean_names(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


class GeminiProvider(BaseDreamProvider):
    """Client for the Google Gemini API."""

    timeout_errors = (google_exceptions.DeadlineExceeded,)
    # The adapter can be built without a key for introspection; every
    # public call validates it before touching the network.
    requires_api_key_at_init = False

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.log.info("Initialized %s with model %s", self.provider_name, self.model.model_id)

    async def _request(
        self,
        model_name: str,
        system_instruction: str | None,
        prompt: str,
        generation_config: dict[str, Any] | None,
    ) -> Any:
        # genai.configure is process-wide and the model binds its client on the
        # first call, so both must happen in one step with this adapter's key.
        genai.configure(api_key=self.require_api_key())
        model = genai.GenerativeModel(
            model_name=model_name,
            system_instruction=system_instruction,
        )
        return await model.generate_content_async(prompt, generation_config=generation_config)

    async def _generate(
        self,
        task: TaskType,
        prompt: str,
        *,
        model_id: str | None = None,
        system_instruction: str | None = None,
        schema: dict[str, Any] | None = None,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ) -> Any:
        generation_config: dict[str, Any] = {}
        if temperature is not None:
            generation_config["temperature"] = temperature
        if max_output_tokens is not None:
            generation_config["max_output_tokens"] = max_output_tokens
        if schema is not None:
            generation_config["response_mime_type"] = "application/json"
            generation_config["response_schema"] = schema

        return await self.call_upstream(
            task,
            self._request,
            model_id or self.model.model_id,
            system_instruction,
            prompt,
            generation_config or None,
        )

    async def analyze_dream(self, dream: DreamData) -> AnalysisResponse:
        self.require_api_key()

        async with self.request_context("analyze") as ctx:
            ctx.info("Starting two-stage dream analysis")
            stage1 = await self._run_stage1(dream)
            symbol_names = _clean_names(stage1.get("symbol_names"))
            ctx.info("Stage 1 completed", symbols=len(symbol_names))

            symbolism = await self._run_stage2(symbol_names, dream, ctx)

            advice = stage1.get("advice")
            if not isinstance(advice, list):
                if not isinstance(advice, str) or not advice:
                    advice = tr(self.lang, "ADVICE_PLACEHOLDER")
                advice = [advice]

            result = normalize_analysis(
                {
                    "summary": stage1.get("summary"),
                    "analysis": stage1.get("analysis"),
                    "advice": advice,
                    "questions": stage1.get("questions"),
                    "symbolism": [symbol.model_dump() for symbol in symbolism],
                },
                provider=self.provider_name,
                lang=self.lang,
            )
            ctx.info("Analysis completed", elapsed_ms=round(ctx.elapsed_ms))
            return result

    async def _run_stage1(self, dream: DreamData) -> dict[str, Any]:
        response = await self._generate(
            TaskType.TEXT,
            build_stage1_prompt(dream, self.lang),
            system_instruction=STAGE1_SYSTEM_INSTRUCTION,
            schema=STAGE1_SCHEMA,
            temperature=self.generation_params().temperature,
            max_output_tokens=self.settings.stage1_max_output_tokens,
        )
        payload = parse_model_json(
            response_text(response),
            provider=self.provider_name,
            lang=self.lang,
            empty_on_failure=True,
        )
        return payload if isinstance(payload, dict) else {}

    async def _run_stage2(
        self, symbol_names: list[str], dream: DreamData, ctx: RequestContext
    ) -> list[DreamSymbol]:
        if not symbol_names:
            return []

        semaphore = asyncio.Semaphore(self.settings.symbol_concurrency)

        async def interpret(name: str) -> DreamSymbol:
            async with semaphore:
                return await self._interpret_symbol(name, dream)

        results = await asyncio.gather(
            *(interpret(name) for name in symbol_names), return_exceptions=True
        )

        symbols: list[DreamSymbol] = []
        failed = 0
        for name, result in zip(symbol_names, results):
            if isinstance(result, DreamSymbol):
                symbols.append(result)
                continue
            if not isinstance(result, Exception):
                raise result
            failed += 1
            ctx.warning("Symbol interpretation failed", symbol=name, error=type(result).__name__)
            symbols.append(DreamSymbol(name=name, meaning=tr(self.lang, "SYMBOL_PLACEHOLDER")))

        if failed:
            ctx.warning(
                "Stage 2 completed with placeholders",
                degraded=f"{failed}/{len(symbol_names)}",
            )
        else:
            ctx.info("Stage 2 completed", symbols=len(symbols))
        return symbols

    async def _interpret_symbol(self, symbol_name: str, dream: DreamData) -> DreamSymbol:
        response = await self._generate(
            TaskType.TEXT,
            build_symbol_prompt(symbol_name, dream, self.lang),
            system_instruction=SYMBOL_SYSTEM_INSTRUCTION,
            schema=SYMBOL_SCHEMA,
            temperature=self.settings.symbol_temperature,
            max_output_tokens=self.settings.symbol_max_output_tokens,
        )
        payload = parse_model_json(
            response_text(response),
            provider=self.provider_name,
            lang=self.lang,
            empty_on_failure=True,
        )
        meaning = payload.get("meaning") if isinstance(payload, dict) else None
        if not isinstance(meaning, str) or not meaning.strip():
            raise InvalidResponseShapeError(
                tr(self.lang, "ERR_SYMBOL_INVALID", index=symbol_name),
                provider=self.provider_name,
            )
        name = payload.get("name")
        if not isinstance(name, str) or not name.strip():
            name = symbol_name
        return DreamSymbol(name=name, meaning=meaning)

    async def generate_image(self, prompt: str) -> str:
        self.require_api_key()

        model_id = (
            self.model.model_id
            if self.model.capabilities.image
            else self.settings.gemini_image_model
        )
        async with self.request_context("image", image_model=model_id) as ctx:
            ctx.info("Starting image generation")
            response = await self._generate(
                TaskType.IMAGE, build_image_prompt(prompt), model_id=model_id
            )
            for part in response_parts(response):
                inline = getattr(part, "inline_data", None)
                data = getattr(inline, "data", None) if inline is not None else None
                if data:
                    ctx.info("Image generated", elapsed_ms=round(ctx.elapsed_ms))
                    mime_type = getattr(inline, "mime_type", None) or "image/png"
                    return to_data_url(data, mime_type)

        raise ImageGenerationError(
            tr(self.lang, "ERR_NO_IMAGE_DATA", provider=self.provider_name),
            provider=self.provider_name,
        )
