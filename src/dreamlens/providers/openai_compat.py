"""Adapter for OpenAI and OpenAI-compatible APIs.

OpenAI, AiTunnel and NeuroAPI (and operator-defined "custom" endpoints)
all expose the OpenAI chat-completions shape, so one class serves them
all; only the base URL differs.
"""

from __future__ import annotations

from typing import Any

import httpx
from openai import APITimeoutError, AsyncOpenAI

from ..errors import ConfigurationError, ImageGenerationError, MalformedResponseError
from ..i18n import tr
from ..models import AnalysisResponse, DreamData, ProviderType, TaskType
from ..normalizer import normalize_analysis, parse_model_json
from ..prompts import ANALYST_SYSTEM_INSTRUCTION, build_analysis_prompt
from .base import BaseDreamProvider, to_data_url

DEFAULT_BASE_URLS: dict[str, str] = {
    ProviderType.OPENAI.value: "https://api.openai.com/v1",
    ProviderType.AITUNNEL.value: "https://api.aitunnel.ru/v1",
    ProviderType.NEUROAPI.value: "https://neuroapi.host/v1",
}


def completion_text(completion: Any) -> str:
    choices = getattr(completion, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    return getattr(message, "content", None) or ""


class OpenAICompatibleProvider(BaseDreamProvider):
    """Client for OpenAI and compatible APIs (AiTunnel, NeuroAPI, custom)."""

    timeout_errors = (APITimeoutError,)

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.base_url = self._resolve_base_url()

        self.http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.request_timeout, connect=self.settings.connect_timeout),
            limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
        )
        # Retries are handled by call_upstream, not by the SDK.
        self.client = AsyncOpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            http_client=self.http_client,
            max_retries=0,
        )
        self.log.info(
            "Initialized %s with model %s at %s",
            self.provider_name,
            self.model.model_id,
            self.base_url,
        )

    def _resolve_base_url(self) -> str:
        if self.config.base_url:
            return self.config.base_url.rstrip("/")
        default = DEFAULT_BASE_URLS.get(self.config.provider_type)
        if default is None:
            raise ConfigurationError(
                tr(self.lang, "ERR_BASE_URL_REQUIRED", provider=self.provider_name),
                provider=self.provider_name,
            )
        return default

    def _completion_request(self, dream: DreamData) -> dict[str, Any]:
        params = self.generation_params()
        request: dict[str, Any] = {
            "model": self.model.model_id,
            "messages": [
                {"role": "system", "content": ANALYST_SYSTEM_INSTRUCTION},
                {"role": "user", "content": build_analysis_prompt(dream, self.lang)},
            ],
            "response_format": {"type": "json_object"},
        }
        if self.model.capabilities.reasoning:
            # Reasoning models reject sampling parameters and max_tokens.
            request["max_completion_tokens"] = params.max_tokens
        else:
            request["temperature"] = params.temperature
            request["max_tokens"] = params.max_tokens
            request["top_p"] = params.top_p
        return request

    async def analyze_dream(self, dream: DreamData) -> AnalysisResponse:
        async with self.request_context("analyze") as ctx:
            ctx.info("Starting dream analysis")
            completion = await self.call_upstream(
                TaskType.TEXT,
                self.client.chat.completions.create,
                **self._completion_request(dream),
            )

            text = completion_text(completion)
            if not text:
                raise MalformedResponseError(
                    tr(self.lang, "ERR_EMPTY_RESPONSE", provider=self.provider_name),
                    provider=self.provider_name,
                )

            payload = parse_model_json(text, provider=self.provider_name, lang=self.lang)
            result = normalize_analysis(payload, provider=self.provider_name, lang=self.lang)
            ctx.info(
                "Analysis completed",
                symbols=len(result.symbolism),
                elapsed_ms=round(ctx.elapsed_ms),
            )
            return result

    async def generate_image(self, prompt: str) -> str:
        # Only OpenAI itself is known to serve the images endpoint.
        if self.config.provider_type != ProviderType.OPENAI.value:
            raise self.unsupported_image()
        if not self.model.capabilities.image:
            raise self.unsupported_image(model_level=True)

        model_id = self.model.model_id
        request: dict[str, Any] = {
            "model": model_id,
            "prompt": prompt,
            "n": 1,
            "size": self.model.overrides.size or self.settings.image_size,
        }
        if model_id.startswith("dall-e"):
            request["response_format"] = "url"
            if self.model.overrides.quality:
                request["quality"] = self.model.overrides.quality

        async with self.request_context("image", size=request["size"]) as ctx:
            ctx.info("Starting image generation")
            response = await self.call_upstream(
                TaskType.IMAGE, self.client.images.generate, **request
            )

            images = getattr(response, "data", None) or []
            image = images[0] if images else None
            b64_json = getattr(image, "b64_json", None)
            if b64_json:
                ctx.info("Image generated (b64_json)")
                return to_data_url(b64_json, "image/png")

            url = getattr(image, "url", None)
            if not url:
                raise ImageGenerationError(
                    tr(self.lang, "ERR_NO_IMAGE_DATA", provider=self.provider_name),
                    provider=self.provider_name,
                )
            if url.startswith("data:image/"):
                return url

            ctx.info("Downloading generated image")
            return await self._download_image(url)

    async def _fetch(self, url: str) -> httpx.Response:
        response = await self.http_client.get(url)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = response.status_code
            # 429 and 5xx go through translate_error so they are retried.
            if status < 500 and status != 429:
                raise ImageGenerationError(
                    tr(self.lang, "ERR_IMAGE_DOWNLOAD_FAILED", status=status),
                    provider=self.provider_name,
                ) from exc
            raise
        return response

    async def _download_image(self, url: str) -> str:
        response = await self.call_upstream(TaskType.IMAGE, self._fetch, url)
        mime_type = response.headers.get("content-type", "image/png").split(";")[0].strip()
        return to_data_url(response.content, mime_type or "image/png")

    async def close(self) -> None:
        await self.http_client.aclose()
