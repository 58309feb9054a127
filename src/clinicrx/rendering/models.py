"""Inputs shared by the document and print renderers."""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..domain.entities.patient import Patient


@dataclass(frozen=True)
class PatientInfo:
    """The patient fields printed above a prescription."""

    first_name: str
    last_name: str
    mr_number: str
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_patient(cls, patient: Patient) -> "PatientInfo":
        return cls(
            first_name=patient.first_name,
            last_name=patient.last_name,
            mr_number=str(patient.mr_number),
            gender=patient.gender.value.capitalize() if patient.gender else None,
            date_of_birth=patient.date_of_birth,
        )
