"""Patient domain entity representing a registered clinic patient."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from ..enums.clinic import Gender
from ..errors import InvalidPatientDataError
from ..value_objects.mr_number import MRNumber


@dataclass
class MedicalHistoryEntry:
    """One diagnosis recorded against a patient, optionally tied to a prescription."""

    date: date
    diagnosis: str
    notes: str = ""
    prescription_id: Optional[str] = None
    entry_id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass
class Patient:
    """Patient domain entity."""

    mr_number: MRNumber
    first_name: str
    last_name: str
    date_of_birth: date
    gender: Gender
    contact_number: str
    email: Optional[str] = None
    address: Optional[str] = None
    patient_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    registration_date: datetime = field(default_factory=datetime.utcnow)
    medical_history: List[MedicalHistoryEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate patient data."""
        self._validate_patient_data()

    def _validate_patient_data(self) -> None:
        """Validate patient data according to business rules."""
        for field_name in ("first_name", "last_name"):
            value = getattr(self, field_name)
            if not value or not value.strip():
                raise InvalidPatientDataError(field_name, value, "must not be empty")
            if len(value) > 80:
                raise InvalidPatientDataError(field_name, value[:50], "too long (max 80 characters)")
            setattr(self, field_name, value.strip())

        clean_contact = "".join(filter(str.isdigit, self.contact_number or ""))
        if not 7 <= len(clean_contact) <= 15:
            raise InvalidPatientDataError(
                "contact_number",
                self.contact_number,
                f"must contain 7 to 15 digits, got {len(clean_contact)}",
            )

        if self.date_of_birth > date.today():
            raise InvalidPatientDataError(
                "date_of_birth", self.date_of_birth.isoformat(), "cannot be in the future"
            )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def age(self, on: Optional[date] = None) -> int:
        """Age in whole years on the given day (today by default)."""
        on = on or date.today()
        dob = self.date_of_birth
        return on.year - dob.year - ((on.month, on.day) < (dob.month, dob.day))

    def matches(self, query: str) -> bool:
        """Search match on MR number, names (case-insensitive) or contact number."""
        needle = query.lower()
        return (
            needle in str(self.mr_number).lower()
            or needle in self.first_name.lower()
            or needle in self.last_name.lower()
            or query in self.contact_number
        )

    def add_medical_history(self, entry: MedicalHistoryEntry) -> None:
        """Record a diagnosis, newest first."""
        self.medical_history.insert(0, entry)
