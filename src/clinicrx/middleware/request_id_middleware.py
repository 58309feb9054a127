"""
Request ID middleware: accepts or assigns ``X-Request-ID`` and echoes it back.
"""
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers[HEADER] = request_id
        return response
