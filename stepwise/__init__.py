"""Run a long task as short steps between a host application's frames."""

__version__ = "0.1.0"
