"""
Domain entities.
"""

from .patient import MedicalHistoryEntry, Patient
from .prescription import Payment, Prescription
from .template import FooterOverlay, HeaderOverlay

__all__ = [
    "FooterOverlay",
    "HeaderOverlay",
    "MedicalHistoryEntry",
    "Patient",
    "Payment",
    "Prescription",
]
