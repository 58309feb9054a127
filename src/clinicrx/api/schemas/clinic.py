"""
Pydantic schemas for patient, prescription and payment endpoints.
"""

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ...core.config import get_settings
from ...domain.entities.patient import MedicalHistoryEntry, Patient
from ...domain.entities.prescription import Payment, Prescription
from ...domain.enums.clinic import Gender, PaymentMethod, PaymentStatus, PrescriptionStatus
from ...domain.value_objects.image_reference import reference_problem


class RegisterPatientRequest(BaseModel):
    """Request schema for patient registration."""

    first_name: str = Field(..., min_length=1, max_length=80, description="Patient first name")
    last_name: str = Field(..., min_length=1, max_length=80, description="Patient last name")
    date_of_birth: dt.date = Field(..., description="Date of birth (YYYY-MM-DD)")
    gender: Gender = Field(..., description="male, female or other")
    contact_number: str = Field(..., min_length=7, max_length=20, description="Phone number")
    email: Optional[str] = Field(None, max_length=254, description="Email address")
    address: Optional[str] = Field(None, max_length=300, description="Postal address")

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_names(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Name fields cannot be empty")
        return v.strip()

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        if "@" not in v:
            raise ValueError("Email must contain '@'")
        return v.strip()


class MedicalHistoryEntrySchema(BaseModel):
    entry_id: str
    date: dt.date
    diagnosis: str
    notes: str = ""
    prescription_id: Optional[str] = None

    @classmethod
    def from_entity(cls, entry: MedicalHistoryEntry) -> "MedicalHistoryEntrySchema":
        return cls(
            entry_id=entry.entry_id,
            date=entry.date,
            diagnosis=entry.diagnosis,
            notes=entry.notes,
            prescription_id=entry.prescription_id,
        )


class AddMedicalHistoryRequest(BaseModel):
    diagnosis: str = Field(..., min_length=1, max_length=500)
    notes: str = Field("", max_length=2000)
    date: Optional[dt.date] = Field(None, description="Defaults to today")


class PatientResponse(BaseModel):
    """Patient record as returned by the API."""

    patient_id: str
    mr_number: str
    first_name: str
    last_name: str
    full_name: str
    date_of_birth: dt.date
    age: int
    gender: Gender
    contact_number: str
    email: Optional[str] = None
    address: Optional[str] = None
    registration_date: dt.datetime
    medical_history: List[MedicalHistoryEntrySchema] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, patient: Patient) -> "PatientResponse":
        return cls(
            patient_id=patient.patient_id,
            mr_number=str(patient.mr_number),
            first_name=patient.first_name,
            last_name=patient.last_name,
            full_name=patient.full_name,
            date_of_birth=patient.date_of_birth,
            age=patient.age(),
            gender=patient.gender,
            contact_number=patient.contact_number,
            email=patient.email,
            address=patient.address,
            registration_date=patient.registration_date,
            medical_history=[MedicalHistoryEntrySchema.from_entity(e) for e in patient.medical_history],
        )


class PatientListResponse(BaseModel):
    patients: List[PatientResponse]
    limit: int
    offset: int


class CreatePrescriptionRequest(BaseModel):
    """Request schema for saving a drawn prescription.

    ``image_url`` is the snapshot of the drawing surface, usually the data URL
    returned by the drawing snapshot endpoint.
    """

    patient_id: str = Field(..., min_length=1)
    image_url: Optional[str] = Field(None, description="Captured drawing (data URL or URL)")
    notes: Optional[str] = Field(None, max_length=5000)
    fee: float = Field(0.0, ge=0)
    discount: float = Field(0.0, ge=0)
    date: Optional[dt.date] = None
    diagnosis: Optional[str] = Field(None, max_length=500)

    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, v: Optional[str]) -> Optional[str]:
        # a missing image is reported by the use case, not here
        if not v:
            return None
        problem = reference_problem(v, get_settings().render.image_hosts())
        if problem:
            raise ValueError(problem)
        return v


class PrescriptionResponse(BaseModel):
    prescription_id: str
    patient_id: str
    doctor_id: str
    image_url: str
    date: dt.date
    notes: Optional[str] = None
    status: PrescriptionStatus
    fee: float
    discount: float
    amount_due: float
    payment_status: PaymentStatus
    created_at: dt.datetime

    @classmethod
    def from_entity(cls, prescription: Prescription) -> "PrescriptionResponse":
        return cls(
            prescription_id=prescription.prescription_id,
            patient_id=prescription.patient_id,
            doctor_id=prescription.doctor_id,
            image_url=prescription.image_url,
            date=prescription.date,
            notes=prescription.notes,
            status=prescription.status,
            fee=prescription.fee,
            discount=prescription.discount,
            amount_due=prescription.amount_due,
            payment_status=prescription.payment_status,
            created_at=prescription.created_at,
        )


class AddPaymentRequest(BaseModel):
    prescription_id: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)
    method: PaymentMethod = PaymentMethod.CASH
    discount: float = Field(0.0, ge=0)
    notes: Optional[str] = Field(None, max_length=1000)


class PaymentResponse(BaseModel):
    payment_id: str
    prescription_id: str
    patient_id: str
    amount: float
    method: PaymentMethod
    discount: float
    date: dt.date
    notes: Optional[str] = None
    created_by: Optional[str] = None

    @classmethod
    def from_entity(cls, payment: Payment) -> "PaymentResponse":
        return cls(
            payment_id=payment.payment_id,
            prescription_id=payment.prescription_id,
            patient_id=payment.patient_id,
            amount=payment.amount,
            method=payment.method,
            discount=payment.discount,
            date=payment.date,
            notes=payment.notes,
            created_by=payment.created_by,
        )
