"""Resumable execution unit wrapping a user task coroutine."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Coroutine

from stepwise.core.errors import BoundaryViolation, ContextError, ContextFinishedError

logger = logging.getLogger(__name__)

TaskFunction = Callable[[Any], Coroutine[Any, Any, None]]

# Token passed from the yield primitive up to step(). Anything else reaching
# step() was yielded by a foreign awaitable.
_SUSPEND = object()


class _SuspendPoint:
    """Awaitable that hands control back to whoever called ``step()``."""

    __slots__ = ()

    def __await__(self):
        yield _SUSPEND


class ResumableContext:
    """
    Drives a coroutine function one step at a time.

    The task is ``async def task(handle)``. Each ``step()`` runs it until it
    awaits the yield primitive, returns, or raises; control always comes back
    synchronously. Errors raised by the task propagate out of ``step()``.
    """

    def __init__(self, task: TaskFunction, handle: Any):
        if not inspect.iscoroutinefunction(task):
            raise ContextError(f"{task!r} is not a coroutine function")
        self._task = task
        self._handle = handle
        self._coro: Coroutine[Any, Any, None] | None = None
        self._running = False
        self._finished = False
        self._steps = 0

    @property
    def steps(self) -> int:
        """Number of completed steps."""
        return self._steps

    @property
    def running(self) -> bool:
        """True while a step is executing task code."""
        return self._running

    def is_alive(self) -> bool:
        """True until the task has returned, raised, or been discarded."""
        return not self._finished

    def suspend(self) -> Awaitable[None]:
        """Return the awaitable behind the yield primitive."""
        if not self._running:
            raise BoundaryViolation("yield primitive awaited outside of a step")
        return _SuspendPoint()

    def step(self) -> None:
        """Resume the task until it next suspends, returns, or raises."""
        if self._finished:
            raise ContextFinishedError("context has already finished")
        if self._running:
            raise BoundaryViolation("context re-entered while executing")

        if self._coro is None:
            self._coro = self._task(self._handle)

        self._running = True
        try:
            signal = self._coro.send(None)
        except StopIteration:
            self._finished = True
            return
        except BaseException:
            self._finished = True
            raise
        finally:
            self._running = False
            self._steps += 1

        if signal is not _SUSPEND:
            self.discard()
            raise BoundaryViolation(
                f"task suspended into a foreign event loop (yielded {signal!r})"
            )

    def discard(self) -> None:
        """
        Abandon the task. A started coroutine is closed so its ``finally``
        blocks and context managers release what they hold.
        """
        if self._running:
            raise BoundaryViolation("cannot discard a context while it is executing")
        coro, self._coro = self._coro, None
        was_alive = not self._finished
        self._finished = True
        if coro is None:
            return
        if was_alive:
            try:
                coro.close()
            except RuntimeError:
                # The task swallowed GeneratorExit and kept awaiting.
                logger.warning("Task ignored close request while being discarded", exc_info=True)
            except Exception:
                logger.exception("Task raised while being discarded")
        else:
            coro.close()
