"""
Beanie document models registered at startup.
"""

from .patient_m import MedicalHistoryEntryMongo, PatientMongo
from .prescription_m import PaymentMongo, PrescriptionMongo

DOCUMENT_MODELS = [PatientMongo, PrescriptionMongo, PaymentMongo]

__all__ = [
    "DOCUMENT_MODELS",
    "MedicalHistoryEntryMongo",
    "PatientMongo",
    "PaymentMongo",
    "PrescriptionMongo",
]
