"""
Payment repository interface.
"""

from abc import ABC, abstractmethod
from typing import List

from ....domain.entities.prescription import Payment


class PaymentRepository(ABC):
    """Abstract repository for payment data access."""

    @abstractmethod
    async def save(self, payment: Payment) -> Payment:
        pass

    @abstractmethod
    async def find_by_patient_id(self, patient_id: str) -> List[Payment]:
        pass

    @abstractmethod
    async def find_by_prescription_id(self, prescription_id: str) -> List[Payment]:
        pass
