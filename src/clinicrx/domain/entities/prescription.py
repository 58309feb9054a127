"""Prescription and payment domain entities."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..enums.clinic import PaymentMethod, PaymentStatus, PrescriptionStatus
from ..errors import InvalidPaymentError, MissingSourceImageError


@dataclass
class Prescription:
    """A drawn prescription for one patient.

    ``image_url`` holds the captured drawing (a data URL or a loadable URL).
    A prescription without it cannot exist.
    """

    patient_id: str
    doctor_id: str
    image_url: str
    date: date = field(default_factory=date.today)
    notes: Optional[str] = None
    status: PrescriptionStatus = PrescriptionStatus.PENDING
    fee: float = 0.0
    discount: float = 0.0
    payment_status: PaymentStatus = PaymentStatus.PENDING
    prescription_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        if not self.image_url or not self.image_url.strip():
            raise MissingSourceImageError()
        if self.fee < 0:
            raise InvalidPaymentError("fee", self.fee, "must not be negative")
        if self.discount < 0 or self.discount > self.fee:
            raise InvalidPaymentError("discount", self.discount, "must be between 0 and the fee")

    @property
    def amount_due(self) -> float:
        return round(self.fee - self.discount, 2)

    def mark_paid(self) -> None:
        self.payment_status = PaymentStatus.PAID


@dataclass
class Payment:
    """Money received against a prescription."""

    prescription_id: str
    patient_id: str
    amount: float
    method: PaymentMethod = PaymentMethod.CASH
    discount: float = 0.0
    date: date = field(default_factory=date.today)
    notes: Optional[str] = None
    created_by: Optional[str] = None
    payment_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise InvalidPaymentError("amount", self.amount, "must not be negative")
        if self.discount < 0:
            raise InvalidPaymentError("discount", self.discount, "must not be negative")
