"""Configuration through environment variables.

``Registry.from_settings()`` reads ``LAZYWIRE_MAX_INITIALIZATION_DURATION_MS``.
``pydantic-settings`` classes can be registered without an initializer.
"""

from __future__ import annotations

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from lazywire import Registry


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="APP_")

    name: str = "demo"


def main() -> None:
    os.environ["LAZYWIRE_MAX_INITIALIZATION_DURATION_MS"] = "2500"
    os.environ["APP_NAME"] = "inventory"

    registry = Registry.from_settings()
    print(f"timeout_ms={registry.max_initialization_duration_ms}")  # => timeout_ms=2500

    registry.add(AppSettings)
    print(f"app_name={registry.get(AppSettings).name}")  # => app_name=inventory


if __name__ == "__main__":
    main()
