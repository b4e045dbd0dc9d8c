"""Headless host running on an asyncio event loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from stepwise.host.base import Bounds, Camera, Host, Point3d, Tool

logger = logging.getLogger(__name__)


class AsyncioHost(Host):
    """
    A host without a screen.

    Timers go through ``loop.call_later``; the view is an in-memory camera
    and a fixed model bounding box. The tool stack behaves like a desktop
    application's: pushing a tool suspends the one below it, popping resumes it.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        camera: Camera | None = None,
        bounds: Bounds | None = None,
        on_invalidate: Callable[[], None] | None = None,
    ):
        self._loop = loop
        self._camera = camera or Camera()
        self._bounds = bounds or Bounds(Point3d(-1.0, -1.0, -1.0), Point3d(1.0, 1.0, 1.0))
        self._on_invalidate = on_invalidate
        self._tools: list[Tool] = []
        self.invalidations = 0
        self.timers_started = 0

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @property
    def active_tool(self) -> Tool | None:
        return self._tools[-1] if self._tools else None

    @property
    def tools(self) -> list[Tool]:
        return list(self._tools)

    # Host interface

    def push_tool(self, tool: Tool) -> None:
        previous = self.active_tool
        if previous is not None:
            previous.suspend()
        self._tools.append(tool)
        tool.activate()

    def pop_tool(self) -> None:
        if not self._tools:
            logger.warning("pop_tool() with an empty tool stack")
            return
        tool = self._tools.pop()
        tool.deactivate()
        if self._tools:
            self._tools[-1].resume()

    def invalidate(self) -> None:
        self.invalidations += 1
        if self._on_invalidate:
            self._on_invalidate()

    def start_timer(self, delay: float, callback: Callable[[], None]) -> None:
        self.timers_started += 1
        self.loop.call_later(delay, callback)

    @property
    def camera(self) -> Camera:
        return self._camera

    @camera.setter
    def camera(self, camera: Camera) -> None:
        self._camera = camera

    def model_bounds(self) -> Bounds:
        return self._bounds

    # User input

    def select_tool(self, tool: Tool | None) -> None:
        """Replace the whole tool stack, deactivating every tool on it."""
        while self._tools:
            self._tools.pop().deactivate()
        if tool is not None:
            self.push_tool(tool)

    def cancel(self, reason: str = "escape") -> None:
        tool = self.active_tool
        if tool is not None:
            tool.on_cancel(reason)

    def move_pointer(self, x: float, y: float, flags: int = 0) -> None:
        tool = self.active_tool
        if tool is not None:
            tool.on_pointer_move(flags, x, y)

    def begin_temporary_tool(self) -> None:
        """An orbit or pan takes over without replacing the active tool."""
        tool = self.active_tool
        if tool is not None:
            tool.suspend()

    def end_temporary_tool(self) -> None:
        tool = self.active_tool
        if tool is not None:
            tool.resume()

    def draw(self, view: Any) -> None:
        for tool in self._tools:
            tool.draw(view)
