"""
In-process registry of drawing surfaces keyed by session id.

Sessions idle for longer than the TTL are dropped, and once the registry is
full the least recently used session makes room for a new one.
"""

import logging
import threading
import time
import uuid
from collections import OrderedDict
from typing import Callable, Tuple

from ..domain.errors import DrawingSessionNotFoundError
from .surface import FreehandSurface

logger = logging.getLogger(__name__)


class DrawingSessionRegistry:
    """Holds live surfaces until they are deleted or expire. Not shared across processes."""

    def __init__(
        self,
        ttl_seconds: float = 1800,
        max_sessions: int = 50,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds
        self._max_sessions = max_sessions
        self._clock = clock
        # session id -> (surface, last used), least recently used first
        self._sessions: "OrderedDict[str, Tuple[FreehandSurface, float]]" = OrderedDict()
        self._lock = threading.Lock()

    def _expire(self, now: float) -> None:
        while self._sessions:
            session_id, (_, last_used) = next(iter(self._sessions.items()))
            if now - last_used <= self._ttl:
                break
            del self._sessions[session_id]
            logger.info(f"Drawing session {session_id} expired")

    def create(self, width: int, height: int, stroke_width: int) -> Tuple[str, FreehandSurface]:
        surface = FreehandSurface(width, height, stroke_width)
        surface.initialize()
        session_id = uuid.uuid4().hex
        with self._lock:
            now = self._clock()
            self._expire(now)
            while len(self._sessions) >= self._max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.warning(f"Drawing session limit reached, evicted {evicted}")
            self._sessions[session_id] = (surface, now)
        logger.debug(f"Drawing session {session_id} created ({width}x{height})")
        return session_id, surface

    def get(self, session_id: str) -> FreehandSurface:
        with self._lock:
            now = self._clock()
            self._expire(now)
            entry = self._sessions.get(session_id)
            if entry is not None:
                self._sessions[session_id] = (entry[0], now)
                self._sessions.move_to_end(session_id)
        if entry is None:
            raise DrawingSessionNotFoundError(session_id)
        return entry[0]

    def remove(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise DrawingSessionNotFoundError(session_id)

    def __len__(self) -> int:
        with self._lock:
            self._expire(self._clock())
            return len(self._sessions)
