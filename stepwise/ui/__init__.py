"""Terminal UI."""

from .app import BoardView, PongApp, TextualHost

__all__ = ["PongApp", "TextualHost", "BoardView"]
