"""
Enumerations shared across the domain layer.
"""

from .clinic import Gender, PaymentMethod, PaymentStatus, PrescriptionStatus, Role
from .template import Alignment, FontSize

__all__ = [
    "Alignment",
    "FontSize",
    "Gender",
    "PaymentMethod",
    "PaymentStatus",
    "PrescriptionStatus",
    "Role",
]
