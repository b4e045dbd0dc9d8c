"""Scheduler state machine for managing activation lifecycle."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Callable


class SchedulerState(Enum):
    """Scheduler states over one activation."""

    IDLE = auto()
    ACTIVE = auto()
    SUSPENDED = auto()
    COMPLETING = auto()
    ABORTING = auto()
    TERMINATED = auto()

    def is_terminal(self) -> bool:
        """Check if this is the terminal state."""
        return self is SchedulerState.TERMINATED

    def is_running(self) -> bool:
        """Check if the task context may exist in this state."""
        return self in (SchedulerState.ACTIVE, SchedulerState.SUSPENDED)


# Valid state transitions
VALID_TRANSITIONS: dict[SchedulerState, set[SchedulerState]] = {
    SchedulerState.IDLE: {SchedulerState.ACTIVE},
    SchedulerState.ACTIVE: {
        SchedulerState.SUSPENDED,
        SchedulerState.COMPLETING,
        SchedulerState.ABORTING,
    },
    SchedulerState.SUSPENDED: {SchedulerState.ACTIVE, SchedulerState.ABORTING},
    SchedulerState.COMPLETING: {SchedulerState.TERMINATED},
    SchedulerState.ABORTING: {SchedulerState.TERMINATED},
    SchedulerState.TERMINATED: set(),
}


@dataclass
class StateTransition:
    """Record of a state transition."""

    from_state: SchedulerState
    to_state: SchedulerState
    timestamp: datetime
    message: str = ""


@dataclass
class ActivationContext:
    """Bookkeeping for one activation."""

    identity: object | None = None
    started_at: datetime | None = None
    terminated_at: datetime | None = None
    transitions: list[StateTransition] = field(default_factory=list)


class SchedulerStateMachine:
    """State machine for scheduler state transitions."""

    def __init__(
        self,
        identity: object | None = None,
        on_transition: Callable[[SchedulerState, SchedulerState, str], None] | None = None,
    ):
        self._state = SchedulerState.IDLE
        self._context = ActivationContext(identity=identity)
        self._on_transition = on_transition

    @property
    def state(self) -> SchedulerState:
        """Current scheduler state."""
        return self._state

    @property
    def context(self) -> ActivationContext:
        """Activation bookkeeping."""
        return self._context

    @property
    def transitions(self) -> list[StateTransition]:
        return self._context.transitions

    def can_transition_to(self, new_state: SchedulerState) -> bool:
        """Check if transition to new state is valid."""
        return new_state in VALID_TRANSITIONS.get(self._state, set())

    def transition_to(self, new_state: SchedulerState, message: str = "") -> bool:
        """
        Attempt to transition to a new state.

        Returns True if transition was successful, False otherwise.
        """
        if not self.can_transition_to(new_state):
            return False

        old_state = self._state
        now = datetime.now()
        self._context.transitions.append(
            StateTransition(from_state=old_state, to_state=new_state, timestamp=now, message=message)
        )
        self._state = new_state

        if new_state == SchedulerState.ACTIVE and self._context.started_at is None:
            self._context.started_at = now
        elif new_state.is_terminal():
            self._context.terminated_at = now

        if self._on_transition:
            self._on_transition(old_state, new_state, message)

        return True

    def get_status_display(self) -> str:
        """Get human-readable status string."""
        state_display = {
            SchedulerState.IDLE: "Idle",
            SchedulerState.ACTIVE: "Running",
            SchedulerState.SUSPENDED: "Suspended",
            SchedulerState.COMPLETING: "Completing...",
            SchedulerState.ABORTING: "Aborting...",
            SchedulerState.TERMINATED: "Finished",
        }
        return state_display.get(self._state, str(self._state))

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "identity": repr(self._context.identity) if self._context.identity is not None else None,
            "state": self._state.name,
            "transitions": [
                {"from": t.from_state.name, "to": t.to_state.name, "message": t.message}
                for t in self._context.transitions
            ],
            "started_at": self._context.started_at.isoformat() if self._context.started_at else None,
            "terminated_at": self._context.terminated_at.isoformat() if self._context.terminated_at else None,
        }
