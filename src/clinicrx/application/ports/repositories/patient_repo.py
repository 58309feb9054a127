"""
Patient repository interface for data access abstraction.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ....domain.entities.patient import MedicalHistoryEntry, Patient


class PatientRepository(ABC):
    """Abstract repository for patient data access."""

    @abstractmethod
    async def save(self, patient: Patient) -> Patient:
        """Save a patient to the repository."""
        pass

    @abstractmethod
    async def find_by_id(self, patient_id: str) -> Optional[Patient]:
        """Find a patient by ID."""
        pass

    @abstractmethod
    async def find_by_mr_number(self, mr_number: str) -> Optional[Patient]:
        """Find a patient by medical record number."""
        pass

    @abstractmethod
    async def find_all(self, limit: int = 100, offset: int = 0) -> List[Patient]:
        """Find all patients with pagination, newest registrations first."""
        pass

    @abstractmethod
    async def search(self, query: str, limit: int = 100, offset: int = 0) -> List[Patient]:
        """Patients whose MR number, first or last name contains ``query`` (any case),
        or whose contact number contains it verbatim. Newest registrations first."""
        pass

    @abstractmethod
    async def add_medical_history(self, patient_id: str, entry: MedicalHistoryEntry) -> Patient:
        """Append a medical history entry and return the updated patient."""
        pass
