"""Error taxonomy for the step scheduler."""

from __future__ import annotations


class StepwiseError(RuntimeError):
    """Base class for all stepwise errors."""


class ConfigurationError(StepwiseError):
    """Bad constructor arguments. Raised synchronously, never reaches a callback."""


class TaskAborted(StepwiseError):
    """Abort signal raised at the start of a tick (cancel or tool change)."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ContextError(StepwiseError):
    """Misuse of a resumable context."""


class ContextFinishedError(ContextError):
    """The context was stepped after its task returned or raised."""


class BoundaryViolation(ContextError):
    """
    Task execution was re-entered or suspended across its own boundary.

    Raised when a context is stepped while it is already executing, when the
    yield primitive is awaited outside of a step, or when the task tries to
    suspend into a foreign event loop.
    """


class InvariantViolation(StepwiseError):
    """A paired guard was used out of order."""
