"""
Prescription repository interface.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ....domain.entities.prescription import Prescription
from ....domain.enums.clinic import PaymentStatus


class PrescriptionRepository(ABC):
    """Abstract repository for prescription data access."""

    @abstractmethod
    async def save(self, prescription: Prescription) -> Prescription:
        pass

    @abstractmethod
    async def find_by_id(self, prescription_id: str) -> Optional[Prescription]:
        pass

    @abstractmethod
    async def find_by_patient_id(self, patient_id: str) -> List[Prescription]:
        """All prescriptions of a patient, newest first."""
        pass

    @abstractmethod
    async def find_all(self, limit: int = 100, offset: int = 0) -> List[Prescription]:
        pass

    @abstractmethod
    async def delete(self, prescription_id: str) -> bool:
        """Delete a prescription. Returns False when nothing was deleted."""
        pass

    @abstractmethod
    async def update_payment_status(self, prescription_id: str, status: PaymentStatus) -> None:
        pass
