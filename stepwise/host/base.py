"""Abstract host interface and view geometry."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any, Callable, NamedTuple


class Point3d(NamedTuple):
    """A point or vector in model space."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: "Point3d") -> "Point3d":  # type: ignore[override]
        return Point3d(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Point3d") -> "Point3d":
        return Point3d(self.x - other.x, self.y - other.y, self.z - other.z)


@dataclass(frozen=True)
class Camera:
    """Camera-like view parameters."""

    eye: Point3d = Point3d(0.0, -10.0, 0.0)
    target: Point3d = Point3d(0.0, 0.0, 0.0)
    up: Point3d = Point3d(0.0, 0.0, 1.0)

    def moved(self, eye: Point3d, target: Point3d) -> "Camera":
        """Return a copy looking from ``eye`` at ``target`` with the same up vector."""
        return replace(self, eye=eye, target=target)


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned model bounding box."""

    min: Point3d = Point3d()
    max: Point3d = Point3d()

    @property
    def center(self) -> Point3d:
        return Point3d(
            (self.min.x + self.max.x) / 2,
            (self.min.y + self.max.y) / 2,
            (self.min.z + self.max.z) / 2,
        )

    def corner(self, index: int) -> Point3d:
        """
        Return one of the eight box corners.

        Bit 0 selects x, bit 1 selects y, bit 2 selects z; a set bit picks the
        max side. Corner 0 is ``min``.
        """
        if not 0 <= index <= 7:
            raise IndexError(f"corner index out of range: {index}")
        return Point3d(
            self.max.x if index & 1 else self.min.x,
            self.max.y if index & 2 else self.min.y,
            self.max.z if index & 4 else self.min.z,
        )


class Tool(ABC):
    """Notifications a host delivers to its active tool."""

    @abstractmethod
    def activate(self) -> None:
        """The tool became the active tool."""

    @abstractmethod
    def deactivate(self) -> None:
        """The tool was popped, replaced, or the host is closing."""

    @abstractmethod
    def on_cancel(self, reason: str) -> None:
        """The user pressed escape or the host cancelled the operation."""

    @abstractmethod
    def suspend(self) -> None:
        """A temporary tool (orbit, pan) took over."""

    @abstractmethod
    def resume(self) -> None:
        """The temporary tool went away."""

    @abstractmethod
    def on_pointer_move(self, flags: int, x: float, y: float) -> None:
        """The pointer moved over the view."""

    @abstractmethod
    def draw(self, view: Any) -> None:
        """Paint the tool's overlay."""


class Host(ABC):
    """Commands the scheduler issues to its host application."""

    @abstractmethod
    def push_tool(self, tool: Tool) -> None:
        """Make ``tool`` the active tool."""
        pass

    @abstractmethod
    def pop_tool(self) -> None:
        """Pop the active tool."""
        pass

    @abstractmethod
    def invalidate(self) -> None:
        """Ask the host to repaint the view."""
        pass

    @abstractmethod
    def start_timer(self, delay: float, callback: Callable[[], None]) -> None:
        """
        Run ``callback`` once after ``delay`` seconds.

        A zero delay still defers: the callback never runs inside this call.
        """
        pass

    @property
    @abstractmethod
    def camera(self) -> Camera:
        """Current view camera."""
        pass

    @camera.setter
    @abstractmethod
    def camera(self, camera: Camera) -> None:
        pass

    @abstractmethod
    def model_bounds(self) -> Bounds:
        """Bounding box of the model shown in the view."""
        pass
