"""
Pydantic schemas for drawing sessions.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from ...drawing.surface import EventKind, PointerType, SurfaceState


class CreateDrawingRequest(BaseModel):
    width: Optional[int] = Field(None, ge=1, le=4000)
    height: Optional[int] = Field(None, ge=1, le=4000)
    stroke_width: Optional[int] = Field(None, ge=1, le=50)


class DrawingSessionResponse(BaseModel):
    session_id: str
    width: int
    height: int
    stroke_width: int
    state: SurfaceState


class PointerEventSchema(BaseModel):
    kind: EventKind
    x: float = 0.0
    y: float = 0.0
    pointer_type: PointerType = PointerType.MOUSE
    origin_x: float = Field(0.0, description="Surface left edge in the event's coordinate space")
    origin_y: float = Field(0.0, description="Surface top edge in the event's coordinate space")


class PointerEventsRequest(BaseModel):
    events: List[PointerEventSchema] = Field(..., min_length=1, max_length=5000)


class EventOutcomeSchema(BaseModel):
    handled: bool
    default_prevented: bool = False


class PointerEventsResponse(BaseModel):
    state: SurfaceState
    outcomes: List[EventOutcomeSchema]


class SnapshotDataUrlResponse(BaseModel):
    session_id: str
    data_url: str
