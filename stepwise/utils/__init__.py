"""Shared utilities."""

from .logger import ActivationLogger, console, setup_logging

__all__ = ["ActivationLogger", "console", "setup_logging"]
