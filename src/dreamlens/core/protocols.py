"""Protocol interfaces for DreamLens dependency injection.

The selection service depends only on these contracts, so tests can hand
it fake stores and fake adapters.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..models import AIModel, AnalysisResponse, DreamData, ProviderConfig, TaskType


@runtime_checkable
class IDreamProvider(Protocol):
    """Interface every provider adapter implements."""

    config: ProviderConfig
    model: AIModel

    async def analyze_dream(self, dream: DreamData) -> AnalysisResponse:
        """Analyze a dream and return the canonical analysis.

        Raises:
            AIProviderError: a subclass naming the provider and failure kind.
        """
        ...

    async def generate_image(self, prompt: str) -> str:
        """Generate an illustration and return it as a base64 data URL.

        Raises:
            UnsupportedCapabilityError: when the provider or model cannot
                generate images.
        """
        ...

    async def close(self) -> None:
        """Release network resources held by the adapter."""
        ...


@runtime_checkable
class IProviderConfigStore(Protocol):
    """Read-only view of the persisted provider configuration."""

    async def list_active_configs(self, task: TaskType) -> list[ProviderConfig]:
        """Return provider configurations flagged active for ``task``.

        The store is expected to hold at most one; an empty list means
        nothing is configured.
        """
        ...

    async def get_model(self, model_id: str) -> AIModel | None:
        """Return the model row with primary key ``model_id``, or None."""
        ...
