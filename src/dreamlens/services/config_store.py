"""Read-only access to persisted provider configuration.

``SupabaseConfigStore`` talks to the managed backend's PostgREST API;
``InMemoryConfigStore`` serves tests and local development, optionally
seeded from a JSON file.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from ..errors import ConfigStoreError
from ..i18n import LANG_EN, tr
from ..models import AIModel, ProviderConfig, TaskType

log = logging.getLogger("dreamlens.services.config_store")

CONFIGS_TABLE = "ai_provider_configs"
MODELS_TABLE = "ai_models"

_ACTIVE_COLUMNS = {
    TaskType.TEXT: "is_active_for_text",
    TaskType.IMAGE: "is_active_for_images",
}


def config_from_row(row: dict[str, Any]) -> ProviderConfig:
    """Build a ProviderConfig from a database row (``config`` holds generation params)."""
    data = dict(row)
    if "generation" not in data and isinstance(data.get("config"), dict):
        data["generation"] = data.pop("config")
    return ProviderConfig.model_validate(data)


def model_from_row(row: dict[str, Any]) -> AIModel:
    """Build an AIModel from a database row (``model_config`` holds overrides)."""
    data = dict(row)
    if "overrides" not in data and isinstance(data.get("model_config"), dict):
        data["overrides"] = data.pop("model_config")
    data.pop("model_config", None)
    return AIModel.model_validate(data)


class InMemoryConfigStore:
    """Config store backed by plain lists."""

    def __init__(
        self,
        configs: Iterable[ProviderConfig] = (),
        models: Iterable[AIModel] = (),
    ):
        self.configs: list[ProviderConfig] = list(configs)
        self.models: dict[str, AIModel] = {model.id: model for model in models}

    @classmethod
    def from_json_file(cls, path: str | Path, lang: str = LANG_EN) -> InMemoryConfigStore:
        """Load ``{"providers": [...], "models": [...]}`` from ``path``."""
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
            configs = [config_from_row(row) for row in raw.get("providers", [])]
            models = [model_from_row(row) for row in raw.get("models", [])]
        except (OSError, ValueError, AttributeError, ValidationError) as exc:
            raise ConfigStoreError(tr(lang, "ERR_STORE_UNAVAILABLE", detail=exc)) from exc
        log.info("Loaded %s provider configs and %s models from %s", len(configs), len(models), path)
        return cls(configs, models)

    def add_config(self, config: ProviderConfig) -> None:
        self.configs.append(config)

    def add_model(self, model: AIModel) -> None:
        self.models[model.id] = model

    async def list_active_configs(self, task: TaskType) -> list[ProviderConfig]:
        return [config for config in self.configs if config.is_active_for(task)]

    async def get_model(self, model_id: str) -> AIModel | None:
        return self.models.get(model_id)


class SupabaseConfigStore:
    """Config store over the Supabase REST (PostgREST) API."""

    def __init__(
        self,
        url: str,
        api_key: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
        lang: str = LANG_EN,
    ):
        self.base_url = url.rstrip("/") + "/rest/v1"
        self.lang = lang
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }

    async def _select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        try:
            resp = await self.http_client.get(
                f"{self.base_url}/{table}", params={"select": "*", **params}, headers=self.headers
            )
            resp.raise_for_status()
            rows = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            log.error("Query on %s failed: %s", table, exc)
            raise ConfigStoreError(tr(self.lang, "ERR_STORE_UNAVAILABLE", detail=exc)) from exc
        if not isinstance(rows, list):
            raise ConfigStoreError(
                tr(self.lang, "ERR_STORE_UNAVAILABLE", detail=f"unexpected payload from {table}")
            )
        return rows

    async def list_active_configs(self, task: TaskType) -> list[ProviderConfig]:
        rows = await self._select(CONFIGS_TABLE, {_ACTIVE_COLUMNS[task]: "eq.true"})
        try:
            return [config_from_row(row) for row in rows]
        except ValidationError as exc:
            raise ConfigStoreError(tr(self.lang, "ERR_STORE_UNAVAILABLE", detail=exc)) from exc

    async def get_model(self, model_id: str) -> AIModel | None:
        rows = await self._select(MODELS_TABLE, {"id": f"eq.{model_id}", "limit": "1"})
        if not rows:
            return None
        try:
            return model_from_row(rows[0])
        except ValidationError as exc:
            raise ConfigStoreError(tr(self.lang, "ERR_STORE_UNAVAILABLE", detail=exc)) from exc

    async def close(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()
