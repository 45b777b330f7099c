from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from .config import CONFIG_FILE, AppConfig, load_config

ENV_PREFIX = "BCV_"


@dataclass(frozen=True, slots=True)
class Settings:
    """Application runtime settings sourced from environment variables."""

    config_path: Path = CONFIG_FILE
    enable_local_api: bool | None = None


def _parse_bool(value: str | None) -> bool | None:
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return None


def _read_settings() -> Settings:
    config_env = os.getenv(f"{ENV_PREFIX}CONFIG_PATH")
    enable_env = os.getenv(f"{ENV_PREFIX}ENABLE_LOCAL_API")
    config_path = Path(config_env) if config_env else CONFIG_FILE
    return Settings(config_path=config_path, enable_local_api=_parse_bool(enable_env))


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return _read_settings()


def load_effective_config(path: Path | None = None, settings: Settings | None = None) -> AppConfig:
    """Load ``config.toml`` and apply environment overrides on top."""

    settings = settings or get_settings()
    config = load_config(path or settings.config_path)
    if settings.enable_local_api is not None:
        config.runtime.enable_local_api = settings.enable_local_api
    return config


__all__ = ["ENV_PREFIX", "Settings", "get_settings", "load_effective_config"]
