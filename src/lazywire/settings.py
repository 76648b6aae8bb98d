from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RegistrySettings(BaseSettings):
    """Registry configuration read from ``LAZYWIRE_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="LAZYWIRE_")

    max_initialization_duration_ms: int = Field(default=10_000, gt=0)


__all__ = ["RegistrySettings"]
