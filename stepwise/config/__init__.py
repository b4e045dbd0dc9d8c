"""Configuration module."""

from .settings import PongConfig, SchedulerConfig, Settings, clear_settings_cache, get_settings

__all__ = ["Settings", "SchedulerConfig", "PongConfig", "get_settings", "clear_settings_cache"]
