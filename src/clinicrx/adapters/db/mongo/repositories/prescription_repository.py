"""
MongoDB implementations of PrescriptionRepository and PaymentRepository.
"""

from typing import List, Optional

from clinicrx.application.ports.repositories.payment_repo import PaymentRepository
from clinicrx.application.ports.repositories.prescription_repo import PrescriptionRepository
from clinicrx.domain.entities.prescription import Payment, Prescription
from clinicrx.domain.enums.clinic import PaymentMethod, PaymentStatus, PrescriptionStatus
from clinicrx.domain.errors import PrescriptionNotFoundError

from ..models.prescription_m import PaymentMongo, PrescriptionMongo
from .errors import persistence_errors, to_date, to_datetime


class MongoPrescriptionRepository(PrescriptionRepository):
    """MongoDB implementation of PrescriptionRepository."""

    async def save(self, prescription: Prescription) -> Prescription:
        fields = dict(
            prescription_id=prescription.prescription_id,
            patient_id=prescription.patient_id,
            doctor_id=prescription.doctor_id,
            date=to_datetime(prescription.date),
            image_url=prescription.image_url,
            notes=prescription.notes,
            status=prescription.status.value,
            fee=prescription.fee,
            discount=prescription.discount,
            payment_status=prescription.payment_status.value,
            created_at=prescription.created_at,
        )
        with persistence_errors():
            doc = await PrescriptionMongo.find_one(
                PrescriptionMongo.prescription_id == prescription.prescription_id
            )
            if doc is None:
                doc = PrescriptionMongo(**fields)
            else:
                for name, value in fields.items():
                    setattr(doc, name, value)
            await doc.save()
        return self._mongo_to_domain(doc)

    async def find_by_id(self, prescription_id: str) -> Optional[Prescription]:
        with persistence_errors():
            doc = await PrescriptionMongo.find_one(PrescriptionMongo.prescription_id == prescription_id)
        return self._mongo_to_domain(doc) if doc else None

    async def find_by_patient_id(self, patient_id: str) -> List[Prescription]:
        with persistence_errors():
            docs = (
                await PrescriptionMongo.find(PrescriptionMongo.patient_id == patient_id)
                .sort("-date")
                .to_list()
            )
        return [self._mongo_to_domain(d) for d in docs]

    async def find_all(self, limit: int = 100, offset: int = 0) -> List[Prescription]:
        with persistence_errors():
            docs = await PrescriptionMongo.find().sort("-date").skip(offset).limit(limit).to_list()
        return [self._mongo_to_domain(d) for d in docs]

    async def delete(self, prescription_id: str) -> bool:
        with persistence_errors():
            doc = await PrescriptionMongo.find_one(PrescriptionMongo.prescription_id == prescription_id)
            if doc is None:
                return False
            await doc.delete()
        return True

    async def update_payment_status(self, prescription_id: str, status: PaymentStatus) -> None:
        with persistence_errors():
            doc = await PrescriptionMongo.find_one(PrescriptionMongo.prescription_id == prescription_id)
            if doc is None:
                raise PrescriptionNotFoundError(prescription_id)
            doc.payment_status = status.value
            await doc.save()

    @staticmethod
    def _mongo_to_domain(doc: PrescriptionMongo) -> Prescription:
        return Prescription(
            prescription_id=doc.prescription_id,
            patient_id=doc.patient_id,
            doctor_id=doc.doctor_id,
            date=to_date(doc.date),
            image_url=doc.image_url,
            notes=doc.notes,
            status=PrescriptionStatus(doc.status),
            fee=doc.fee,
            discount=doc.discount,
            payment_status=PaymentStatus(doc.payment_status),
            created_at=doc.created_at,
        )


class MongoPaymentRepository(PaymentRepository):
    """MongoDB implementation of PaymentRepository."""

    async def save(self, payment: Payment) -> Payment:
        doc = PaymentMongo(
            payment_id=payment.payment_id,
            prescription_id=payment.prescription_id,
            patient_id=payment.patient_id,
            amount=payment.amount,
            discount=payment.discount,
            date=to_datetime(payment.date),
            method=payment.method.value,
            notes=payment.notes,
            created_by=payment.created_by,
        )
        with persistence_errors():
            await doc.insert()
        return payment

    async def find_by_patient_id(self, patient_id: str) -> List[Payment]:
        with persistence_errors():
            docs = await PaymentMongo.find(PaymentMongo.patient_id == patient_id).sort("-date").to_list()
        return [self._mongo_to_domain(d) for d in docs]

    async def find_by_prescription_id(self, prescription_id: str) -> List[Payment]:
        with persistence_errors():
            docs = await PaymentMongo.find(PaymentMongo.prescription_id == prescription_id).to_list()
        return [self._mongo_to_domain(d) for d in docs]

    @staticmethod
    def _mongo_to_domain(doc: PaymentMongo) -> Payment:
        return Payment(
            payment_id=doc.payment_id,
            prescription_id=doc.prescription_id,
            patient_id=doc.patient_id,
            amount=doc.amount,
            discount=doc.discount,
            date=to_date(doc.date),
            method=PaymentMethod(doc.method),
            notes=doc.notes,
            created_by=doc.created_by,
        )
