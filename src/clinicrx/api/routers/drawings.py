"""Drawing session endpoints.

A session owns one freehand surface. Clients stream pointer events to it and
take a PNG snapshot when the prescription is finished; the snapshot's data
URL is what gets saved as the prescription image.
"""

from typing import Optional

from fastapi import APIRouter, Request, status
from fastapi.responses import Response

from ...core.config import get_settings
from ...drawing.surface import PointerEvent
from ..deps import CurrentUserDep, DrawingRegistryDep
from ..schemas.common import ApiResponse, ErrorResponse
from ..schemas.drawing import (
    CreateDrawingRequest,
    DrawingSessionResponse,
    EventOutcomeSchema,
    PointerEventsRequest,
    PointerEventsResponse,
    SnapshotDataUrlResponse,
)
from ..utils.responses import ok

router = APIRouter(prefix="/drawings", tags=["Drawing"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Drawing session not found"}}


def _session_response(session_id: str, surface) -> DrawingSessionResponse:
    return DrawingSessionResponse(
        session_id=session_id,
        width=surface.width,
        height=surface.height,
        stroke_width=surface.stroke_width,
        state=surface.state,
    )


@router.post("", response_model=ApiResponse[DrawingSessionResponse], status_code=status.HTTP_201_CREATED)
async def create_drawing(
    request: Request,
    registry: DrawingRegistryDep,
    user: CurrentUserDep,
    body: Optional[CreateDrawingRequest] = None,
):
    render = get_settings().render
    body = body or CreateDrawingRequest()
    session_id, surface = registry.create(
        body.width or render.canvas_width,
        body.height or render.canvas_height,
        body.stroke_width or render.stroke_width,
    )
    return ok(request, data=_session_response(session_id, surface), message="Drawing session created")


@router.post("/{session_id}/events", response_model=ApiResponse[PointerEventsResponse], responses=NOT_FOUND)
async def apply_events(
    request: Request,
    session_id: str,
    body: PointerEventsRequest,
    registry: DrawingRegistryDep,
):
    """Apply pointer events in order."""
    surface = registry.get(session_id)
    outcomes = []
    for event in body.events:
        outcome = surface.dispatch(
            PointerEvent(
                kind=event.kind,
                x=event.x,
                y=event.y,
                pointer_type=event.pointer_type,
                origin_x=event.origin_x,
                origin_y=event.origin_y,
            )
        )
        outcomes.append(EventOutcomeSchema(handled=outcome.handled, default_prevented=outcome.default_prevented))
    return ok(request, data=PointerEventsResponse(state=surface.state, outcomes=outcomes))


@router.post("/{session_id}/clear", response_model=ApiResponse[DrawingSessionResponse], responses=NOT_FOUND)
async def clear_drawing(request: Request, session_id: str, registry: DrawingRegistryDep):
    surface = registry.get(session_id)
    surface.clear()
    return ok(request, data=_session_response(session_id, surface), message="Drawing cleared")


@router.get(
    "/{session_id}/snapshot",
    responses={200: {"content": {"image/png": {}}}, **NOT_FOUND},
)
async def snapshot(request: Request, session_id: str, registry: DrawingRegistryDep):
    png = registry.get(session_id).snapshot()
    return Response(content=png, media_type="image/png")


@router.get(
    "/{session_id}/snapshot/data-url",
    response_model=ApiResponse[SnapshotDataUrlResponse],
    responses=NOT_FOUND,
)
async def snapshot_data_url(request: Request, session_id: str, registry: DrawingRegistryDep):
    data_url = registry.get(session_id).snapshot_data_url()
    return ok(request, data=SnapshotDataUrlResponse(session_id=session_id, data_url=data_url))


@router.delete("/{session_id}", response_model=ApiResponse[dict], responses=NOT_FOUND)
async def delete_drawing(request: Request, session_id: str, registry: DrawingRegistryDep):
    registry.remove(session_id)
    return ok(request, data={"session_id": session_id}, message="Drawing session deleted")
