"""Cooperative step scheduler driven by host timers."""

from __future__ import annotations

import gc
import inspect
import itertools
import logging
import time
from typing import Any, Callable

from stepwise.config import SchedulerConfig, get_settings
from stepwise.core.context import ResumableContext, TaskFunction
from stepwise.core.errors import BoundaryViolation, ConfigurationError, TaskAborted
from stepwise.core.guards import SingleFireGuard, ViewStateGuard, defer_once
from stepwise.core.outcome import TOOL_CHANGE, USER_ESCAPE, Completed, Outcome, classify
from stepwise.core.registry import ActivationRegistry, default_registry
from stepwise.core.state_machine import SchedulerState, SchedulerStateMachine, StateTransition
from stepwise.host.base import Host, Tool
from stepwise.utils.logger import ActivationLogger

logger = logging.getLogger(__name__)

_labels = itertools.count(1)


def _required_arity(func: Callable[..., Any]) -> int | None:
    """
    Number of required positional parameters, or None when ``func`` takes
    ``*args`` or required keyword-only parameters.
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return None

    required = 0
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind is inspect.Parameter.KEYWORD_ONLY:
            if param.default is inspect.Parameter.empty:
                return None
            continue
        if param.kind is inspect.Parameter.VAR_KEYWORD:
            continue
        if param.default is inspect.Parameter.empty:
            required += 1
    return required


def _validate(on_complete: Any, on_abort: Any, user_task: Any) -> None:
    if not (user_task is not None and inspect.iscoroutinefunction(user_task) and _required_arity(user_task) == 1):
        raise ConfigurationError("GameTool user_task argument must be a coroutine function of arity one")
    if not (callable(on_complete) and _required_arity(on_complete) == 0):
        raise ConfigurationError("GameTool on_complete argument must be a callable of arity zero")
    if not (callable(on_abort) and _required_arity(on_abort) == 1):
        raise ConfigurationError("GameTool on_abort argument must be a callable of arity one")


class GameTool(Tool):
    """
    Runs one user task as a sequence of short steps between host frames.

    The task is ``async def task(tool)`` and calls ``await tool.refresh()``
    wherever the host may repaint. Each tick resumes the task until its next
    refresh. When the task returns, raises, or is cancelled, the tool restores
    the view, pops itself and schedules exactly one of ``on_complete()`` or
    ``on_abort(outcome)`` through the host timer.

    Only one tool may be active per registry. Constructing a second one while
    the first is running does nothing: ``started`` stays False.

    Args:
        on_complete: Called with no arguments when the task returns.
        on_abort: Called with an ``Aborted`` or ``Failed`` outcome.
        user_task: Coroutine function taking the tool as its only argument.
        host: Host application driving the tool.
        identity: Opaque key a caller may use to correlate activations.
        registry: Activation registry, defaults to the process-wide one.
        config: Scheduler configuration, defaults to the loaded settings.
    """

    def __init__(
        self,
        on_complete: Callable[[], None],
        on_abort: Callable[[Outcome], None],
        user_task: TaskFunction | None = None,
        *,
        host: Host,
        identity: object | None = None,
        registry: ActivationRegistry | None = None,
        config: SchedulerConfig | None = None,
    ):
        _validate(on_complete, on_abort, user_task)

        self._host = host
        self._registry = registry if registry is not None else default_registry
        self._config = config if config is not None else get_settings().scheduler
        self._on_complete = on_complete
        self._on_abort = on_abort
        self._user_task = user_task
        self._identity = identity
        self.user_draw: Callable[[Any], None] | None = None

        self._label = f"GameTool#{next(_labels)}"
        self._log = ActivationLogger(self._label)
        self._machine = SchedulerStateMachine(identity, on_transition=self._on_transition)
        self._view_guard = ViewStateGuard(host, look_away=self._config.look_away)
        self._context: ResumableContext | None = None
        self._outcome: Outcome | None = None
        self._reentry: BoundaryViolation | None = None

        self._cancel_requested = False
        self._cancel_reason: str | None = None
        self._enable_redraw = self._config.enable_redraw

        self._mouse_x = 0.0
        self._mouse_y = 0.0
        self._mouse_move_count = 0
        self._ticks = 0
        self._steps = 0
        self._last_scheduled_at: float | None = None

        # A double click on a toolbar command lands here
        if not self._registry.try_acquire(self):
            logger.warning(f"Another task is already active; {self._label} was not started")
            self._started = False
            return

        self._started = True
        self._machine.transition_to(SchedulerState.ACTIVE, "Started")
        self._view_guard.save()
        self._host.push_tool(self)
        self._schedule_next_tick()

    @classmethod
    def run(
        cls,
        on_complete: Callable[[], None],
        on_abort: Callable[[Outcome], None],
        **kwargs: Any,
    ) -> Callable[[TaskFunction], "GameTool"]:
        """
        Decorator form: the decorated coroutine function becomes the task.

            @GameTool.run(done, aborted, host=host)
            async def task(tool):
                ...
        """

        def decorator(user_task: TaskFunction) -> "GameTool":
            return cls(on_complete, on_abort, user_task, **kwargs)

        return decorator

    # ------------------------------------------------------------------
    # Read surface

    @property
    def on_complete(self) -> Callable[[], None]:
        return self._on_complete

    @property
    def on_abort(self) -> Callable[[Outcome], None]:
        return self._on_abort

    @property
    def user_task(self) -> TaskFunction:
        return self._user_task  # type: ignore[return-value]

    @property
    def identity(self) -> object | None:
        return self._identity

    @property
    def mouse_x(self) -> float:
        return self._mouse_x

    @property
    def mouse_y(self) -> float:
        return self._mouse_y

    @property
    def mouse_move_count(self) -> int:
        return self._mouse_move_count

    @property
    def state(self) -> SchedulerState:
        return self._machine.state

    @property
    def transitions(self) -> list[StateTransition]:
        return self._machine.transitions

    @property
    def status_display(self) -> str:
        """Short human-readable state, for status bars."""
        return self._machine.get_status_display()

    def history(self) -> dict:
        """The activation's state history as plain data."""
        return self._machine.to_dict()

    @property
    def outcome(self) -> Outcome | None:
        """How the activation ended, once it has."""
        return self._outcome

    @property
    def started(self) -> bool:
        """False when construction was refused because another task was active."""
        return self._started

    @property
    def is_active(self) -> bool:
        return self._registry.is_held_by(self)

    @property
    def ticks(self) -> int:
        """Number of ticks the host has delivered, including suspended polls."""
        return self._ticks

    @property
    def steps(self) -> int:
        """Number of times the task was resumed."""
        return self._steps

    @property
    def last_scheduled_at(self) -> float | None:
        """Monotonic time at which the last step was scheduled."""
        return self._last_scheduled_at

    @property
    def has_context(self) -> bool:
        return self._context is not None

    def refresh(self):
        """
        The yield primitive. ``await tool.refresh()`` hands control back to
        the host until the next tick.
        """
        if self._context is None:
            raise BoundaryViolation("refresh() awaited outside of the running task")
        return self._context.suspend()

    def __repr__(self) -> str:
        return f"<{self._label} {self._machine.state.name}>"

    # ------------------------------------------------------------------
    # Host notifications

    def activate(self) -> None:
        if not self._machine.state.is_running():
            self._log.debug("activate() ignored")
            return
        self._registry.try_acquire(self)
        if self._machine.state is SchedulerState.SUSPENDED:
            self._machine.transition_to(SchedulerState.ACTIVE, "Activated")
        self._cancel_requested = False
        self._cancel_reason = None
        self._enable_redraw = self._config.enable_redraw

    def deactivate(self) -> None:
        if not self._machine.state.is_running():
            self._log.debug("deactivate() ignored")
            return
        self._registry.release(self)
        if self._machine.state is SchedulerState.SUSPENDED:
            self._machine.transition_to(SchedulerState.ACTIVE, "Deactivated")
        self._cancel_reason = TOOL_CHANGE

    def on_cancel(self, reason: str = "") -> None:
        if not self._machine.state.is_running():
            self._log.debug("on_cancel() ignored")
            return
        # The host's own reason code is not reported to the caller
        self._log.debug(f"Cancel requested by host ({reason!r})")
        self._cancel_requested = True
        self._cancel_reason = USER_ESCAPE

    def suspend(self) -> None:
        if self._machine.state is SchedulerState.ACTIVE:
            self._machine.transition_to(SchedulerState.SUSPENDED, "Suspended by host")

    def resume(self) -> None:
        if self._machine.state is SchedulerState.SUSPENDED:
            self._machine.transition_to(SchedulerState.ACTIVE, "Resumed by host")

    def on_pointer_move(self, flags: int, x: float, y: float) -> None:
        self._mouse_x = x
        self._mouse_y = y
        self._mouse_move_count += 1

    def draw(self, view: Any) -> None:
        if self.user_draw is not None:
            self.user_draw(view)
        else:
            logger.debug(f"{self._label} has no user_draw method")

    # ------------------------------------------------------------------
    # Scheduling

    def _on_transition(self, old: SchedulerState, new: SchedulerState, message: str) -> None:
        self._log.state_change(old.name, new.name)

    def _schedule_next_tick(self) -> None:
        if self._enable_redraw:
            self._host.invalidate()
        self._host.start_timer(self._config.tick_delay_seconds, SingleFireGuard(self._tick))
        self._last_scheduled_at = time.monotonic()

    def _tick(self) -> Outcome | None:
        """
        Run one step of the task.

        Returns the outcome once the activation has ended, None while the
        task keeps running. Nothing raised by the task escapes.
        """
        state = self._machine.state
        if not state.is_running():
            self._log.debug(f"Stray tick in state {state.name}")
            return self._outcome

        if self._context is not None and self._context.running:
            # The host called back into us from inside the task's own step
            self._log.warning("Tick re-entered while the task was executing")
            self._reentry = BoundaryViolation("host re-entered the task from inside a step")
            return None

        self._ticks += 1

        # Orbit, pan and similar temporary tools: poll slowly until resumed
        if state is SchedulerState.SUSPENDED and self._registry.is_held_by(self):
            self._host.start_timer(self._config.suspend_poll_seconds, SingleFireGuard(self._tick))
            return None

        try:
            if self._cancel_requested or not self._registry.is_held_by(self):
                # Copy the reason now; popping the tool triggers deactivate(),
                # which overwrites it.
                reason = self._cancel_reason or TOOL_CHANGE
                raise TaskAborted(reason)

            if self._context is None:
                self._context = ResumableContext(self._user_task, self)  # type: ignore[arg-type]

            self._steps += 1
            self._context.step()

            if self._reentry is not None:
                raise self._reentry

            if self._context.is_alive():
                self._schedule_next_tick()
                return None

        except Exception as e:
            outcome = classify(e)
            if isinstance(e, (TaskAborted, BoundaryViolation)):
                self._log.info(f"Task stopped: {outcome}")
            else:
                self._log.exception(f"Task raised {type(e).__name__}")
            return self._finish(SchedulerState.ABORTING, outcome)

        return self._finish(SchedulerState.COMPLETING, Completed())

    def _finish(self, state: SchedulerState, outcome: Outcome) -> Outcome:
        """Release everything the activation holds and schedule one terminal callback."""
        self._machine.transition_to(state, str(outcome))
        self._outcome = outcome

        try:
            self._view_guard.restore()
        except Exception:
            self._log.exception("Failed to restore the view")

        try:
            self._discard_context()
        except Exception:
            self._log.exception("Failed to discard the task")

        try:
            # On a tool change the host has already popped us
            if self._registry.is_held_by(self):
                self._host.pop_tool()
        except Exception:
            self._log.exception("Failed to pop the tool")
        finally:
            self._registry.release(self)

        try:
            self._host.invalidate()
        except Exception:
            self._log.exception("Failed to invalidate the view")

        if isinstance(outcome, Completed):
            defer_once(self._host, self._on_complete)
        else:
            defer_once(self._host, lambda: self._on_abort(outcome))

        self._log.outcome(outcome.succeeded, str(outcome))
        self._machine.transition_to(SchedulerState.TERMINATED, "Terminal callback scheduled")
        return outcome

    def _discard_context(self) -> None:
        context, self._context = self._context, None
        if context is not None:
            context.discard()
        # Reclaim whatever the abandoned task still references
        if self._config.force_gc:
            gc.collect()
