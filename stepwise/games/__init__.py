"""Games that run on the step scheduler."""

from .pong import Canvas, PongGame, start

__all__ = ["Canvas", "PongGame", "start"]
