"""Host applications that drive the step scheduler."""

from .asyncio_host import AsyncioHost
from .base import Bounds, Camera, Host, Point3d, Tool

__all__ = [
    "Host",
    "Tool",
    "Camera",
    "Bounds",
    "Point3d",
    "AsyncioHost",
]
