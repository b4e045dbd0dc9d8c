"""Paired guards used around one activation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from stepwise.core.errors import InvariantViolation

if TYPE_CHECKING:
    from stepwise.host.base import Camera, Host

logger = logging.getLogger(__name__)


class SingleFireGuard:
    """
    Runs a zero-argument callback at most once.

    Some hosts fire a timer entry again when the callback itself raises more
    UI events; only the first invocation reaches the wrapped body.
    """

    def __init__(self, callback: Callable[[], Any], name: str = ""):
        self._callback = callback
        self._name = name or getattr(callback, "__qualname__", repr(callback))
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._fired

    def __call__(self) -> Any:
        if self._fired:
            logger.debug(f"Ignoring repeated invocation of {self._name}")
            return None
        self._fired = True
        return self._callback()


def defer_once(host: Host, callback: Callable[[], None], delay: float = 0.0) -> SingleFireGuard:
    """
    Schedule ``callback`` through the host timer, guarded to fire once.

    Use this to run caller code (dialogs, terminal callbacks) outside of the
    current host call stack.
    """
    guard = SingleFireGuard(callback)
    host.start_timer(delay, guard)
    return guard


class ViewStateGuard:
    """
    Saves the host camera for the lifetime of an activation.

    With ``look_away`` enabled the camera is pointed away from the model so
    the host redraws cheaply while the task runs.
    """

    def __init__(self, host: Host, look_away: bool = True):
        self._host = host
        self._look_away = look_away
        self._saved: Camera | None = None
        self._save_count = 0
        self._restore_count = 0

    @property
    def saved(self) -> bool:
        """True between save() and restore()."""
        return self._save_count == 1 and self._restore_count == 0

    @property
    def save_count(self) -> int:
        return self._save_count

    @property
    def restore_count(self) -> int:
        return self._restore_count

    def save(self) -> None:
        if self._save_count:
            raise InvariantViolation("view state already saved for this activation")
        self._save_count = 1
        if not self._look_away:
            return

        camera = self._host.camera
        self._saved = camera
        bounds = self._host.model_bounds()
        corner = bounds.corner(0)
        self._host.camera = camera.moved(eye=corner, target=corner - bounds.center)
        logger.debug(f"Looking away from the model: {self._host.camera}")

    def restore(self) -> None:
        if not self._save_count:
            raise InvariantViolation("view state restored before it was saved")
        if self._restore_count:
            raise InvariantViolation("view state restored twice")
        self._restore_count = 1
        if self._saved is None:
            return

        self._host.camera = self._saved
        self._saved = None
        logger.debug("Camera restored")
