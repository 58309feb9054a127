"""Register Patient use case."""

import logging

from ...domain.entities.patient import Patient
from ...domain.value_objects.mr_number import MRNumber
from ..dto.clinic_dto import RegisterPatientRequest
from ..ports.repositories.patient_repo import PatientRepository

logger = logging.getLogger("clinicrx")

MAX_MR_NUMBER_ATTEMPTS = 5


class RegisterPatientUseCase:
    """Use case for registering a new patient under a fresh MR number."""

    def __init__(self, patient_repository: PatientRepository):
        self._patient_repository = patient_repository

    async def _next_mr_number(self) -> MRNumber:
        for _ in range(MAX_MR_NUMBER_ATTEMPTS):
            candidate = MRNumber.generate()
            if await self._patient_repository.find_by_mr_number(candidate.value) is None:
                return candidate
            logger.warning(f"MR number collision on {candidate.value}, regenerating")
        raise RuntimeError("Could not allocate a unique MR number")

    async def execute(self, request: RegisterPatientRequest) -> Patient:
        """Execute the register patient use case."""
        patient = Patient(
            mr_number=await self._next_mr_number(),
            first_name=request.first_name,
            last_name=request.last_name,
            date_of_birth=request.date_of_birth,
            gender=request.gender,
            contact_number=request.contact_number,
            email=(request.email or None),
            address=(request.address or None),
        )
        saved = await self._patient_repository.save(patient)
        logger.info(f"Registered patient {saved.patient_id} ({saved.mr_number})")
        return saved
