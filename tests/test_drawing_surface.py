"""
Freehand surface: stroke state machine, clear and snapshot behavior.
"""

import pytest

from clinicrx.domain.errors import DrawingSessionNotFoundError, SurfaceNotInitializedError
from clinicrx.drawing.sessions import DrawingSessionRegistry
from clinicrx.drawing.surface import (
    EventKind,
    FreehandSurface,
    PointerEvent,
    PointerType,
    SurfaceState,
)


@pytest.fixture
def surface():
    s = FreehandSurface(200, 100)
    s.initialize()
    return s


def blank_snapshot(width=200, height=100) -> bytes:
    fresh = FreehandSurface(width, height)
    fresh.initialize()
    return fresh.snapshot()


def test_stroke_with_movement_marks_the_surface(surface):
    surface.start_stroke((10, 10))
    surface.extend_stroke((50, 60))
    surface.extend_stroke((120, 40))
    surface.end_stroke()
    assert surface.snapshot() != blank_snapshot()


def test_stroke_without_movement_leaves_surface_blank(surface):
    surface.start_stroke((10, 10))
    surface.end_stroke()
    assert surface.snapshot() == blank_snapshot()


def test_clear_restores_fresh_encoding(surface):
    surface.start_stroke((0, 0))
    surface.extend_stroke((199, 99))
    surface.end_stroke()
    surface.clear()
    assert surface.snapshot() == blank_snapshot()
    assert (surface.width, surface.height) == (200, 100)


def test_snapshot_does_not_mutate(surface):
    surface.start_stroke((5, 5))
    surface.extend_stroke((80, 80))
    first = surface.snapshot()
    assert surface.snapshot() == first
    assert surface.state == SurfaceState.DRAWING


def test_start_stroke_is_ignored_before_initialize():
    s = FreehandSurface(50, 50)
    assert s.start_stroke((1, 1)) is False
    assert s.state == SurfaceState.UNINITIALIZED
    with pytest.raises(SurfaceNotInitializedError):
        s.snapshot()


def test_extend_outside_drawing_is_ignored(surface):
    assert surface.extend_stroke((30, 30)) is False
    assert surface.snapshot() == blank_snapshot()


def test_end_stroke_is_idempotent(surface):
    surface.end_stroke()
    surface.end_stroke()
    assert surface.state == SurfaceState.READY


def test_pointer_leave_ends_stroke(surface):
    surface.start_stroke((1, 1))
    surface.pointer_leave()
    assert surface.state == SurfaceState.READY
    assert surface.extend_stroke((40, 40)) is False


def test_dispatch_uses_surface_relative_points_and_prevents_touch_scroll(surface):
    down = PointerEvent(EventKind.DOWN, x=110, y=60, pointer_type=PointerType.TOUCH, origin_x=100, origin_y=50)
    assert down.point == (10, 10)
    assert surface.dispatch(down).handled is True

    move = PointerEvent(EventKind.MOVE, x=150, y=90, pointer_type=PointerType.TOUCH, origin_x=100, origin_y=50)
    outcome = surface.dispatch(move)
    assert outcome.handled is True
    assert outcome.default_prevented is True

    mouse_move = PointerEvent(EventKind.MOVE, x=160, y=95, pointer_type=PointerType.MOUSE, origin_x=100, origin_y=50)
    assert surface.dispatch(mouse_move).default_prevented is False

    surface.dispatch(PointerEvent(EventKind.LEAVE))
    assert surface.state == SurfaceState.READY


def test_registry_create_get_remove():
    registry = DrawingSessionRegistry()
    session_id, surface = registry.create(300, 200, 3)
    assert surface.is_initialized
    assert registry.get(session_id) is surface
    assert len(registry) == 1
    registry.remove(session_id)
    with pytest.raises(DrawingSessionNotFoundError):
        registry.get(session_id)
    with pytest.raises(DrawingSessionNotFoundError):
        registry.remove(session_id)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_registry_drops_idle_sessions():
    clock = FakeClock()
    registry = DrawingSessionRegistry(ttl_seconds=60, max_sessions=10, clock=clock)
    idle, _ = registry.create(10, 10, 2)
    active, _ = registry.create(10, 10, 2)

    clock.now += 45
    registry.get(active)
    clock.now += 30

    with pytest.raises(DrawingSessionNotFoundError):
        registry.get(idle)
    assert registry.get(active) is not None
    assert len(registry) == 1


def test_registry_evicts_least_recently_used_when_full():
    clock = FakeClock()
    registry = DrawingSessionRegistry(ttl_seconds=3600, max_sessions=2, clock=clock)
    first, _ = registry.create(10, 10, 2)
    clock.now += 1
    second, _ = registry.create(10, 10, 2)
    clock.now += 1
    # touching the first session makes the second the oldest
    registry.get(first)
    clock.now += 1
    third, _ = registry.create(10, 10, 2)

    assert len(registry) == 2
    with pytest.raises(DrawingSessionNotFoundError):
        registry.get(second)
    registry.get(first)
    registry.get(third)
