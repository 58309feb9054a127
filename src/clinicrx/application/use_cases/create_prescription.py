"""Create Prescription use case."""

import logging
from datetime import date

from ...domain.entities.patient import MedicalHistoryEntry
from ...domain.entities.prescription import Prescription
from ...domain.errors import MissingSourceImageError, PatientNotFoundError
from ..dto.clinic_dto import CreatePrescriptionRequest
from ..ports.repositories.patient_repo import PatientRepository
from ..ports.repositories.prescription_repo import PrescriptionRepository

logger = logging.getLogger("clinicrx")


class CreatePrescriptionUseCase:
    """Persist a drawn prescription for an existing patient.

    A prescription is only accepted once its drawing exists; the optional
    diagnosis is mirrored into the patient's medical history.
    """

    def __init__(
        self,
        patient_repository: PatientRepository,
        prescription_repository: PrescriptionRepository,
    ):
        self._patient_repository = patient_repository
        self._prescription_repository = prescription_repository

    async def execute(self, request: CreatePrescriptionRequest, doctor_id: str) -> Prescription:
        if not request.image_url:
            raise MissingSourceImageError()

        patient = await self._patient_repository.find_by_id(request.patient_id)
        if patient is None:
            raise PatientNotFoundError(request.patient_id)

        prescription = Prescription(
            patient_id=patient.patient_id,
            doctor_id=doctor_id,
            image_url=request.image_url,
            date=request.date or date.today(),
            notes=request.notes or None,
            fee=request.fee,
            discount=request.discount,
        )
        saved = await self._prescription_repository.save(prescription)

        if request.diagnosis:
            await self._patient_repository.add_medical_history(
                patient.patient_id,
                MedicalHistoryEntry(
                    date=saved.date,
                    diagnosis=request.diagnosis,
                    notes=request.notes or "",
                    prescription_id=saved.prescription_id,
                ),
            )

        logger.info(f"Prescription {saved.prescription_id} created for patient {patient.patient_id}")
        return saved
