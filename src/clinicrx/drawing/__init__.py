"""
Freehand capture surface: rasterizes pointer strokes into a PNG.
"""

from .surface import FreehandSurface, PointerEvent, SurfaceState
from .sessions import DrawingSessionRegistry

__all__ = ["DrawingSessionRegistry", "FreehandSurface", "PointerEvent", "SurfaceState"]
