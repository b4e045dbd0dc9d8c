"""Shared fixtures: a host with a hand-cranked timer queue."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from stepwise.config import SchedulerConfig
from stepwise.core import ActivationRegistry, default_registry
from stepwise.host import Bounds, Camera, Host, Point3d, Tool


class RecordingHost(Host):
    """
    Host fake. Timers queue up until the test fires them; every command the
    scheduler issues is appended to ``calls``.
    """

    def __init__(self, camera: Camera | None = None, bounds: Bounds | None = None):
        self.timers: list[tuple[float, Callable[[], Any]]] = []
        self.fired_delays: list[float] = []
        self.tools: list[Tool] = []
        self.calls: list[str] = []
        self.invalidations = 0
        self.camera_writes: list[Camera] = []
        self._camera = camera or Camera(
            eye=Point3d(10.0, -20.0, 5.0),
            target=Point3d(0.0, 0.0, 0.0),
            up=Point3d(0.0, 0.0, 1.0),
        )
        self._bounds = bounds or Bounds(Point3d(-2.0, -4.0, 0.0), Point3d(2.0, 4.0, 6.0))

    def push_tool(self, tool: Tool) -> None:
        self.calls.append("push_tool")
        self.tools.append(tool)
        tool.activate()

    def pop_tool(self) -> None:
        self.calls.append("pop_tool")
        tool = self.tools.pop()
        tool.deactivate()

    def invalidate(self) -> None:
        self.calls.append("invalidate")
        self.invalidations += 1

    def start_timer(self, delay: float, callback: Callable[[], Any]) -> None:
        self.calls.append("start_timer")
        self.timers.append((delay, callback))

    @property
    def camera(self) -> Camera:
        return self._camera

    @camera.setter
    def camera(self, camera: Camera) -> None:
        self.calls.append("set_camera")
        self.camera_writes.append(camera)
        self._camera = camera

    def model_bounds(self) -> Bounds:
        return self._bounds

    # Test helpers

    @property
    def active_tool(self) -> Tool | None:
        return self.tools[-1] if self.tools else None

    def fire_next(self) -> Any:
        """Run the oldest pending timer and return what its callback returned."""
        delay, callback = self.timers.pop(0)
        self.fired_delays.append(delay)
        return callback()

    def run_until_idle(self, limit: int = 1000) -> int:
        """Fire timers until none are pending. Returns how many fired."""
        fired = 0
        while self.timers:
            if fired >= limit:
                raise AssertionError(f"timers still pending after {limit} firings")
            self.fire_next()
            fired += 1
        return fired

    def select_other_tool(self) -> None:
        """Replace the active tool, the way picking a toolbar tool does."""
        while self.tools:
            self.tools.pop().deactivate()


@pytest.fixture
def host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture
def registry() -> ActivationRegistry:
    return ActivationRegistry()


@pytest.fixture
def config() -> SchedulerConfig:
    return SchedulerConfig(force_gc=False)


@pytest.fixture
def callbacks():
    """Terminal callbacks that record what fired."""

    class Recorder:
        def __init__(self) -> None:
            self.completed = 0
            self.aborted: list[Any] = []

        def on_complete(self) -> None:
            self.completed += 1

        def on_abort(self, outcome) -> None:
            self.aborted.append(outcome)

        @property
        def total(self) -> int:
            return self.completed + len(self.aborted)

    return Recorder()


@pytest.fixture(autouse=True)
def release_default_registry():
    yield
    holder = default_registry.holder
    if holder is not None:
        default_registry.release(holder)
