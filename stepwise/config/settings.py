"""Configuration settings loader with YAML and environment variables support."""

from __future__ import annotations

import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchedulerConfig(BaseModel):
    """Step scheduler configuration."""

    # Delay between ticks while the task is running
    tick_delay_seconds: float = Field(default=0.0, ge=0.0)
    # Poll interval while a temporary tool has suspended the task
    suspend_poll_seconds: float = Field(default=0.25, gt=0.0)
    # Point the camera away from the model while the task runs
    look_away: bool = True
    # Ask the host to repaint after every step
    enable_redraw: bool = True
    # Collect garbage right after an abandoned task is discarded
    force_gc: bool = True


class PongConfig(BaseModel):
    """Pong demo configuration."""

    width: int = Field(default=60, ge=20)
    height: int = Field(default=20, ge=8)
    paddle_height: int = Field(default=4, ge=1)
    points_to_win: int = Field(default=3, ge=1)
    max_frames: int = Field(default=20000, ge=1)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_prefix="STEPWISE_", env_nested_delimiter="__")

    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    pong: PongConfig = Field(default_factory=PongConfig)

    # App settings
    log_dir: str = "logs"
    log_to_file: bool = False


def _resolve_env_vars(value: Any) -> Any:
    """Resolve environment variables in string values like ${VAR_NAME}."""
    if isinstance(value, str):
        pattern = r"\$\{([^}]+)\}"
        matches = re.findall(pattern, value)
        for match in matches:
            env_value = os.getenv(match, "")
            value = value.replace(f"${{{match}}}", env_value)
        return value
    elif isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_resolve_env_vars(item) for item in value]
    return value


def load_config_file(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from YAML file."""
    if config_path is None:
        # Try default locations
        locations = [
            Path("config/config.yaml"),
            Path("config.yaml"),
            Path.home() / ".stepwise" / "config.yaml",
        ]
        for loc in locations:
            if loc.exists():
                config_path = loc
                break

    if config_path is None or not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        config_data = yaml.safe_load(f) or {}

    # Resolve environment variables
    return _resolve_env_vars(config_data)


@lru_cache
def get_settings(config_path: str | None = None) -> Settings:
    """Get application settings (cached)."""
    path = Path(config_path) if config_path else None
    config_data = load_config_file(path)

    if "scheduler" in config_data:
        config_data["scheduler"] = SchedulerConfig(**config_data["scheduler"])
    if "pong" in config_data:
        config_data["pong"] = PongConfig(**config_data["pong"])

    return Settings(**config_data)


def clear_settings_cache() -> None:
    """Clear the settings cache."""
    get_settings.cache_clear()
