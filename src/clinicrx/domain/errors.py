"""
Domain-specific error types for business rule violations.
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base domain error."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class PatientNotFoundError(DomainError):
    """Patient not found."""

    def __init__(self, patient_id: str) -> None:
        message = f"Patient with ID '{patient_id}' not found"
        super().__init__(message, "PATIENT_NOT_FOUND", {"patient_id": patient_id})


class PrescriptionNotFoundError(DomainError):
    """Prescription not found."""

    def __init__(self, prescription_id: str) -> None:
        message = f"Prescription with ID '{prescription_id}' not found"
        super().__init__(
            message, "PRESCRIPTION_NOT_FOUND", {"prescription_id": prescription_id}
        )


class DrawingSessionNotFoundError(DomainError):
    """Drawing session not found (expired or never created)."""

    def __init__(self, session_id: str) -> None:
        message = f"Drawing session '{session_id}' not found"
        super().__init__(message, "DRAWING_SESSION_NOT_FOUND", {"session_id": session_id})


class InvalidPatientDataError(DomainError):
    """Invalid patient data."""

    def __init__(self, field: str, value: Any, reason: str) -> None:
        message = f"Invalid patient data. Field: {field}, {reason}"
        super().__init__(
            message, "INVALID_PATIENT_DATA", {"field": field, "value": value}
        )


class InvalidPaymentError(DomainError):
    """Payment values violate business rules."""

    def __init__(self, field: str, value: Any, reason: str) -> None:
        message = f"Invalid payment. Field: {field}, {reason}"
        super().__init__(message, "INVALID_PAYMENT", {"field": field, "value": value})


class MissingSourceImageError(DomainError):
    """A prescription cannot be persisted without its drawn image."""

    def __init__(self) -> None:
        super().__init__(
            "Prescription image is required. Draw and save the prescription first.",
            "MISSING_SOURCE_IMAGE",
        )


class InvalidTemplateValueError(DomainError):
    """Unknown alignment, font size or other template value."""

    def __init__(self, field: str, value: Any, allowed: list) -> None:
        message = f"Invalid value for {field}: {value!r}. Allowed: {', '.join(allowed)}"
        super().__init__(
            message, "INVALID_TEMPLATE_VALUE", {"field": field, "value": value, "allowed": allowed}
        )


class InvalidUpload(DomainError):
    """Logo upload rejected before any load is attempted."""

    def __init__(self, constraint: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "INVALID_UPLOAD", {"constraint": constraint, **(details or {})})
        self.constraint = constraint


class SurfaceNotInitializedError(DomainError):
    """Snapshot requested from a drawing surface that never initialized."""

    def __init__(self) -> None:
        super().__init__("Drawing surface is not initialized", "SURFACE_NOT_INITIALIZED")


class ImageLoadError(DomainError):
    """An image reference could not be fetched or decoded."""

    def __init__(self, reference: str, reason: str) -> None:
        # data: URLs can be megabytes long; keep the message readable
        shown = reference if len(reference) <= 80 else reference[:77] + "..."
        super().__init__(
            f"Failed to load image {shown}: {reason}",
            "IMAGE_LOAD_FAILED",
            {"reference": shown, "reason": reason},
        )
        self.reason = reason


class SourceImageLoadError(DomainError):
    """The prescription's own image could not be loaded. No document can be produced."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            "Failed to load prescription image. Please try again.",
            "SOURCE_IMAGE_LOAD_FAILED",
            {"reason": reason},
        )


class LogoLoadError(DomainError):
    """The optional header logo could not be loaded. Composition continues without it."""

    def __init__(self, reason: str) -> None:
        super().__init__("Failed to load header logo", "LOGO_LOAD_FAILED", {"reason": reason})


class PersistenceError(DomainError):
    """Opaque failure from the storage backend, surfaced verbatim."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "PERSISTENCE_ERROR")
