"""API key lookup.

Provider configurations store the *name* of the environment variable that
holds their key, so operators can add providers without code changes.
Adapters receive a resolver instead of touching the environment directly.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping

SecretResolver = Callable[[str], str]


def env_secret_resolver(name: str) -> str:
    """Return the value of environment variable ``name`` ("" when unset)."""
    if not name:
        return ""
    return os.environ.get(name, "").strip()


def mapping_secret_resolver(values: Mapping[str, str]) -> SecretResolver:
    """Build a resolver over a fixed mapping (tests, embedded deployments)."""

    def resolve(name: str) -> str:
        return (values.get(name) or "").strip()

    return resolve
