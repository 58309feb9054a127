"""
Clinic record enums: roles, patient gender, prescription and payment states.
"""

from enum import Enum


class Role(str, Enum):
    """Access roles."""
    DOCTOR = "doctor"
    STAFF = "staff"
    ADMIN = "admin"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class PrescriptionStatus(str, Enum):
    """Prescription lifecycle."""
    PENDING = "pending"
    PROCESSED = "processed"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    """Payment state of a prescription."""
    PENDING = "pending"
    PAID = "paid"
    WAIVED = "waived"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    OTHER = "other"
