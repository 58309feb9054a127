"""Request DTOs passed from the API layer to use cases."""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ...domain.enums.clinic import Gender, PaymentMethod


@dataclass
class RegisterPatientRequest:
    """Request DTO for patient registration."""

    first_name: str
    last_name: str
    date_of_birth: date
    gender: Gender
    contact_number: str
    email: Optional[str] = None
    address: Optional[str] = None


@dataclass
class CreatePrescriptionRequest:
    """Request DTO for saving a drawn prescription."""

    patient_id: str
    image_url: Optional[str]
    notes: Optional[str] = None
    fee: float = 0.0
    discount: float = 0.0
    date: Optional[date] = None
    diagnosis: Optional[str] = None


@dataclass
class AddPaymentRequest:
    """Request DTO for recording a payment."""

    prescription_id: str
    amount: float
    method: PaymentMethod = PaymentMethod.CASH
    discount: float = 0.0
    notes: Optional[str] = None
