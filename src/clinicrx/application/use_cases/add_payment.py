"""Add Payment use case."""

import logging

from ...domain.entities.prescription import Payment
from ...domain.enums.clinic import PaymentStatus
from ...domain.errors import PrescriptionNotFoundError
from ..dto.clinic_dto import AddPaymentRequest
from ..ports.repositories.payment_repo import PaymentRepository
from ..ports.repositories.prescription_repo import PrescriptionRepository

logger = logging.getLogger("clinicrx")


class AddPaymentUseCase:
    """Record a payment and mark its prescription as paid."""

    def __init__(
        self,
        prescription_repository: PrescriptionRepository,
        payment_repository: PaymentRepository,
    ):
        self._prescription_repository = prescription_repository
        self._payment_repository = payment_repository

    async def execute(self, request: AddPaymentRequest, user_id: str) -> Payment:
        prescription = await self._prescription_repository.find_by_id(request.prescription_id)
        if prescription is None:
            raise PrescriptionNotFoundError(request.prescription_id)

        payment = Payment(
            prescription_id=prescription.prescription_id,
            patient_id=prescription.patient_id,
            amount=request.amount,
            method=request.method,
            discount=request.discount,
            notes=request.notes or None,
            created_by=user_id,
        )
        saved = await self._payment_repository.save(payment)
        await self._prescription_repository.update_payment_status(
            prescription.prescription_id, PaymentStatus.PAID
        )
        logger.info(f"Payment {saved.payment_id} recorded for prescription {prescription.prescription_id}")
        return saved
