"""
Server-side freehand drawing surface backed by a Pillow image.

State machine::

    UNINITIALIZED --initialize--> READY --start_stroke--> DRAWING
                                    ^                        |
                                    +--end_stroke/leave------+

Events arrive one at a time and each is applied fully before the next.
"""

import base64
import io
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from PIL import Image, ImageDraw

from ..domain.errors import SurfaceNotInitializedError

logger = logging.getLogger(__name__)

BACKGROUND = (255, 255, 255)
INK = (0, 0, 0)

Point = Tuple[float, float]


class SurfaceState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    DRAWING = "drawing"


class EventKind(str, Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    LEAVE = "leave"


class PointerType(str, Enum):
    MOUSE = "mouse"
    TOUCH = "touch"
    PEN = "pen"


@dataclass(frozen=True)
class PointerEvent:
    """A pointer event in client coordinates.

    ``origin_x``/``origin_y`` give the surface's top-left corner in the same
    coordinate space, so the surface-relative point is the difference.
    """

    kind: EventKind
    x: float = 0.0
    y: float = 0.0
    pointer_type: PointerType = PointerType.MOUSE
    origin_x: float = 0.0
    origin_y: float = 0.0

    @property
    def point(self) -> Point:
        return (self.x - self.origin_x, self.y - self.origin_y)


@dataclass(frozen=True)
class EventOutcome:
    """What the surface did with one event."""

    handled: bool
    # set for touch moves so the client suppresses scrolling
    default_prevented: bool = False


class FreehandSurface:
    """A white raster that accumulates round-capped black strokes."""

    def __init__(self, width: int = 600, height: int = 800, stroke_width: int = 2):
        if width <= 0 or height <= 0:
            raise ValueError("Surface dimensions must be positive")
        self.width = width
        self.height = height
        self.stroke_width = stroke_width
        self._image: Optional[Image.Image] = None
        self._draw: Optional[ImageDraw.ImageDraw] = None
        self._last: Optional[Point] = None
        self.state = SurfaceState.UNINITIALIZED

    def initialize(self) -> None:
        """Allocate the raster. Safe to call again; an initialized surface is left as is."""
        if self._image is not None:
            return
        self._image = Image.new("RGB", (self.width, self.height), BACKGROUND)
        self._draw = ImageDraw.Draw(self._image)
        self.state = SurfaceState.READY

    @property
    def is_initialized(self) -> bool:
        return self._image is not None

    def start_stroke(self, point: Point) -> bool:
        if self.state == SurfaceState.UNINITIALIZED:
            return False
        self._last = point
        self.state = SurfaceState.DRAWING
        return True

    def extend_stroke(self, point: Point) -> bool:
        if self.state != SurfaceState.DRAWING or self._last is None:
            return False
        self._segment(self._last, point)
        self._last = point
        return True

    def end_stroke(self) -> None:
        if self.state == SurfaceState.DRAWING:
            self.state = SurfaceState.READY
        self._last = None

    # losing the pointer mid-stroke ends the stroke
    pointer_leave = end_stroke

    def _segment(self, start: Point, end: Point) -> None:
        width = self.stroke_width
        self._draw.line([start, end], fill=INK, width=width)
        r = width / 2
        for x, y in (start, end):
            self._draw.ellipse([x - r, y - r, x + r, y + r], fill=INK)

    def clear(self) -> None:
        """Blank the raster to white, keeping its size."""
        if self._image is None:
            return
        self._draw.rectangle([0, 0, self.width, self.height], fill=BACKGROUND)
        if self.state == SurfaceState.DRAWING:
            self.state = SurfaceState.READY
        self._last = None

    def dispatch(self, event: PointerEvent) -> EventOutcome:
        """Route a pointer event to the matching stroke operation."""
        if event.kind == EventKind.DOWN:
            return EventOutcome(self.start_stroke(event.point))
        if event.kind == EventKind.MOVE:
            handled = self.extend_stroke(event.point)
            return EventOutcome(handled, default_prevented=handled and event.pointer_type == PointerType.TOUCH)
        if event.kind == EventKind.UP:
            self.end_stroke()
        else:
            self.pointer_leave()
        return EventOutcome(True)

    def snapshot(self) -> bytes:
        """PNG encoding of the current raster. Does not modify it."""
        if self._image is None:
            raise SurfaceNotInitializedError()
        buf = io.BytesIO()
        self._image.save(buf, format="PNG")
        return buf.getvalue()

    def snapshot_data_url(self) -> str:
        return "data:image/png;base64," + base64.b64encode(self.snapshot()).decode("ascii")
