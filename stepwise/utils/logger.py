"""Rich-formatted logging setup."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

# Custom theme for logging
CUSTOM_THEME = Theme(
    {
        "error": "bold red",
        "success": "bold green",
        "state": "bold blue",
    }
)

# Global console instance
console = Console(theme=CUSTOM_THEME)


class ActivationFormatter(logging.Formatter):
    """Prefixes records logged on behalf of one activation."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        activation = getattr(record, "activation", None)
        if activation:
            return f"[{activation}] {message}"
        return message


def setup_logging(
    log_dir: str | Path = "logs",
    level: int = logging.INFO,
    log_to_file: bool = False,
) -> None:
    """
    Setup logging with Rich console handler and optional file handler.

    Args:
        log_dir: Directory to store log files
        level: Logging level
        log_to_file: Whether to also log to file
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    rich_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        markup=True,
    )
    rich_handler.setFormatter(ActivationFormatter("%(message)s"))
    root_logger.addHandler(rich_handler)

    if log_to_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"stepwise_{timestamp}.log"

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("textual").setLevel(logging.WARNING)


class ActivationLogger:
    """Logger wrapper for one scheduler activation."""

    def __init__(self, activation: str):
        self.activation = activation
        self._logger = logging.getLogger(f"stepwise.activation.{activation}")

    def _log(self, level: int, msg: str, *args, **kwargs) -> None:
        extra = kwargs.pop("extra", {})
        extra["activation"] = self.activation
        self._logger.log(level, msg, *args, extra=extra, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.WARNING, msg, *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs) -> None:
        kwargs.setdefault("exc_info", True)
        self._log(logging.ERROR, msg, *args, **kwargs)

    def state_change(self, from_state: str, to_state: str) -> None:
        """Log a state transition."""
        self.debug(f"State: [state]{from_state}[/state] -> [state]{to_state}[/state]")

    def outcome(self, succeeded: bool, details: str = "") -> None:
        """Log how the activation ended."""
        if succeeded:
            self.info(f"[success]Task completed[/success] {details}")
        else:
            self.warning(f"[error]Task aborted[/error] {details}")


def print_banner() -> None:
    """Print application banner."""
    banner = """
+==============================================================+
|                          stepwise                            |
|        Long-running tasks, one step per host frame           |
+==============================================================+
"""
    console.print(banner, style="bold cyan")
