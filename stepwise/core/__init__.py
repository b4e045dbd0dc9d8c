"""Core module - resumable tasks and the step scheduler."""

from .context import ResumableContext
from .errors import (
    BoundaryViolation,
    ConfigurationError,
    ContextError,
    ContextFinishedError,
    InvariantViolation,
    StepwiseError,
    TaskAborted,
)
from .guards import SingleFireGuard, ViewStateGuard, defer_once
from .outcome import Aborted, Completed, Failed, Outcome, classify
from .registry import ActivationRegistry, default_registry
from .scheduler import GameTool
from .state_machine import SchedulerState, SchedulerStateMachine

__all__ = [
    "GameTool",
    "ResumableContext",
    "SchedulerState",
    "SchedulerStateMachine",
    "ActivationRegistry",
    "default_registry",
    "SingleFireGuard",
    "ViewStateGuard",
    "defer_once",
    # Outcomes
    "Outcome",
    "Completed",
    "Aborted",
    "Failed",
    "classify",
    # Errors
    "StepwiseError",
    "ConfigurationError",
    "TaskAborted",
    "ContextError",
    "ContextFinishedError",
    "BoundaryViolation",
    "InvariantViolation",
]
