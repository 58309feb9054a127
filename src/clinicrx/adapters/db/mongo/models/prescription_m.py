"""
MongoDB Beanie models for prescriptions and payments.
"""

from datetime import datetime
from typing import Optional

from beanie import Document
from pydantic import Field


class PrescriptionMongo(Document):
    """MongoDB model for Prescription entity."""

    prescription_id: str = Field(..., description="Prescription ID")
    patient_id: str = Field(..., description="Patient ID reference")
    doctor_id: str = Field(..., description="Prescribing doctor")
    date: datetime = Field(..., description="Prescription date")
    image_url: str = Field(..., description="Drawn prescription image (data URL or URL)")
    notes: Optional[str] = Field(None, description="Free-text notes")
    status: str = Field(default="pending", description="pending, processed, completed")
    fee: float = Field(default=0.0)
    discount: float = Field(default=0.0)
    payment_status: str = Field(default="pending", description="pending, paid, waived")
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "prescriptions"
        indexes = [
            "prescription_id",
            [("patient_id", 1), ("date", -1)],
        ]


class PaymentMongo(Document):
    """MongoDB model for Payment entity."""

    payment_id: str = Field(..., description="Payment ID")
    prescription_id: str = Field(..., description="Prescription ID reference")
    patient_id: str = Field(..., description="Patient ID reference")
    amount: float = Field(..., description="Amount received")
    discount: float = Field(default=0.0)
    date: datetime = Field(..., description="Payment date")
    method: str = Field(default="cash", description="cash, card, other")
    notes: Optional[str] = Field(None)
    created_by: Optional[str] = Field(None, description="User who recorded the payment")

    class Settings:
        name = "payments"
        indexes = [
            "payment_id",
            "prescription_id",
            [("patient_id", 1), ("date", -1)],
        ]
