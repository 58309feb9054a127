from ..domain.errors import (
    DomainError,
    DrawingSessionNotFoundError,
    InvalidUpload,
    PatientNotFoundError,
    PersistenceError,
    PrescriptionNotFoundError,
    SourceImageLoadError,
)


class APIError(Exception):
    def __init__(self, code: str, message: str, http_status: int = 400, details: dict = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details


class ValidationError(APIError):
    def __init__(self, message: str, details: dict = None):
        super().__init__("INVALID_INPUT", message, 422, details)


class NotFoundError(APIError):
    def __init__(self, message: str, details: dict = None):
        super().__init__("NOT_FOUND", message, 404, details)


class UnauthorizedError(APIError):
    def __init__(self, message: str = "Unauthorized", details: dict = None):
        super().__init__("UNAUTHORIZED", message, 401, details)


class ForbiddenError(APIError):
    def __init__(self, message: str = "Forbidden", details: dict = None):
        super().__init__("FORBIDDEN", message, 403, details)


class DownstreamError(APIError):
    def __init__(self, message: str, details: dict = None):
        super().__init__("DOWNSTREAM_ERROR", message, 502, details)


# Domain error -> HTTP status; anything unlisted is a 400
DOMAIN_ERROR_STATUS = (
    (PatientNotFoundError, 404),
    (PrescriptionNotFoundError, 404),
    (DrawingSessionNotFoundError, 404),
    (InvalidUpload, 422),
    (SourceImageLoadError, 502),
    (PersistenceError, 502),
)


def domain_error_status(exc: DomainError) -> int:
    for error_type, status in DOMAIN_ERROR_STATUS:
        if isinstance(exc, error_type):
            return status
    return 400
