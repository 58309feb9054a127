"""
MongoDB Beanie models for patients.

BSON has no calendar-date type, so dates are stored as midnight datetimes.
"""

from datetime import datetime
from typing import List, Optional

from beanie import Document
from pydantic import BaseModel, Field


class MedicalHistoryEntryMongo(BaseModel):
    """Embedded medical history entry."""
    entry_id: str = Field(..., description="Entry ID")
    date: datetime = Field(..., description="Diagnosis date")
    diagnosis: str = Field(..., description="Diagnosis")
    notes: str = Field(default="", description="Free-text notes")
    prescription_id: Optional[str] = Field(None, description="Prescription that recorded this entry")


class PatientMongo(Document):
    """MongoDB model for Patient entity."""

    patient_id: str = Field(..., description="Patient ID")
    mr_number: str = Field(..., description="Medical record number")
    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    date_of_birth: datetime = Field(..., description="Date of birth")
    gender: str = Field(..., description="Patient gender")
    contact_number: str = Field(..., description="Contact number")
    email: Optional[str] = Field(None, description="Email address")
    address: Optional[str] = Field(None, description="Postal address")
    registration_date: datetime = Field(default_factory=datetime.utcnow)
    medical_history: List[MedicalHistoryEntryMongo] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "patients"
        indexes = [
            "patient_id",
            "mr_number",
            [("registration_date", -1)],
        ]
