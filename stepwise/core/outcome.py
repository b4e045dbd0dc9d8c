"""Termination outcomes and the classifier that produces them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from stepwise.core.errors import BoundaryViolation, TaskAborted

USER_ESCAPE = "User Escape"
TOOL_CHANGE = "Deactivate - Tool Change"
MENU_CLICK_ABORT = "User Menu-Click Abort"


@dataclass(frozen=True)
class Completed:
    """The task returned normally."""

    @property
    def succeeded(self) -> bool:
        return True

    def __str__(self) -> str:
        return "Completed"


@dataclass(frozen=True)
class Aborted:
    """The task was stopped by the user or the host."""

    reason: str

    @property
    def succeeded(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"Aborted: {self.reason}"


@dataclass(frozen=True)
class Failed:
    """The task raised. ``error`` is the original exception, untouched."""

    error: BaseException

    @property
    def succeeded(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"Failed: {type(self.error).__name__}: {self.error}"


Outcome = Union[Completed, Aborted, Failed]


def classify(error: BaseException | None = None) -> Outcome:
    """
    Map a raised condition (or its absence) to an outcome.

    A ``BoundaryViolation`` means the host re-entered the task through an
    unrelated UI action; it is reported as a user abort, not a failure.
    """
    if error is None:
        return Completed()
    if isinstance(error, TaskAborted):
        return Aborted(error.reason)
    if isinstance(error, BoundaryViolation):
        return Aborted(MENU_CLICK_ABORT)
    return Failed(error)
