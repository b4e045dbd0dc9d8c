"""Process-wide activation registry."""

from __future__ import annotations

from typing import Any


class ActivationRegistry:
    """
    Allows at most one scheduler to be active at a time.

    Acquisition fails fast instead of queuing. A double click on a toolbar
    command must not start a second task.
    """

    def __init__(self) -> None:
        self._holder: Any | None = None

    @property
    def is_active(self) -> bool:
        return self._holder is not None

    @property
    def holder(self) -> Any | None:
        return self._holder

    def is_held_by(self, owner: Any) -> bool:
        return self._holder is not None and self._holder is owner

    def try_acquire(self, owner: Any) -> bool:
        """Take the registry for ``owner``. Re-acquiring by the holder succeeds."""
        if self._holder is None:
            self._holder = owner
            return True
        return self._holder is owner

    def release(self, owner: Any) -> bool:
        """Release the registry if ``owner`` holds it."""
        if not self.is_held_by(owner):
            return False
        self._holder = None
        return True


default_registry = ActivationRegistry()
