"""Patient-related API endpoints."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Query, Request, status

from ...application.dto.clinic_dto import RegisterPatientRequest
from ...application.use_cases.register_patient import RegisterPatientUseCase
from ...domain.entities.patient import MedicalHistoryEntry
from ...domain.errors import InvalidPatientDataError, PatientNotFoundError
from ..deps import CurrentUserDep, PatientRepositoryDep, PaymentRepositoryDep, PrescriptionRepositoryDep
from ..schemas.clinic import (
    AddMedicalHistoryRequest,
    PatientListResponse,
    PatientResponse,
    PaymentResponse,
    PrescriptionResponse,
    RegisterPatientRequest as RegisterPatientRequestSchema,
)
from ..schemas.common import ApiResponse, ErrorResponse
from ..utils.responses import fail, ok

router = APIRouter(prefix="/patients", tags=["Patients"])
logger = logging.getLogger("clinicrx")


@router.post(
    "",
    response_model=ApiResponse[PatientResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register a new patient",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid patient data"},
        422: {"model": ErrorResponse, "description": "Validation error"},
    },
)
async def register_patient(
    http_request: Request,
    request: RegisterPatientRequestSchema,
    patient_repo: PatientRepositoryDep,
    user: CurrentUserDep,
):
    """Register a patient under a freshly generated MR number."""
    try:
        dto_request = RegisterPatientRequest(
            first_name=request.first_name,
            last_name=request.last_name,
            date_of_birth=request.date_of_birth,
            gender=request.gender,
            contact_number=request.contact_number,
            email=request.email,
            address=request.address,
        )
        patient = await RegisterPatientUseCase(patient_repo).execute(dto_request)
        logger.info(f"Patient {patient.patient_id} registered by {user.user_id}")
        return ok(http_request, data=PatientResponse.from_entity(patient), message="Patient registered")
    except InvalidPatientDataError as e:
        return fail(
            http_request,
            error=e.error_code,
            message=e.message,
            details=e.details,
            status_code=status.HTTP_400_BAD_REQUEST,
        )


@router.get("", response_model=ApiResponse[PatientListResponse], summary="List patients")
async def list_patients(
    request: Request,
    patient_repo: PatientRepositoryDep,
    q: Optional[str] = Query(None, max_length=100, description="Match on MR number, name or phone"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    query = (q or "").strip()
    if query:
        patients = await patient_repo.search(query, limit=limit, offset=offset)
    else:
        patients = await patient_repo.find_all(limit=limit, offset=offset)
    data = PatientListResponse(
        patients=[PatientResponse.from_entity(p) for p in patients],
        limit=limit,
        offset=offset,
    )
    return ok(request, data=data)


@router.get(
    "/{patient_id}",
    response_model=ApiResponse[PatientResponse],
    responses={404: {"model": ErrorResponse, "description": "Patient not found"}},
)
async def get_patient(request: Request, patient_id: str, patient_repo: PatientRepositoryDep):
    patient = await patient_repo.find_by_id(patient_id)
    if patient is None:
        return _patient_not_found(request, patient_id)
    return ok(request, data=PatientResponse.from_entity(patient))


@router.post(
    "/{patient_id}/medical-history",
    response_model=ApiResponse[PatientResponse],
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse, "description": "Patient not found"}},
)
async def add_medical_history(
    request: Request,
    patient_id: str,
    body: AddMedicalHistoryRequest,
    patient_repo: PatientRepositoryDep,
):
    """Record a diagnosis that is not tied to a prescription."""
    entry = MedicalHistoryEntry(
        date=body.date or date.today(),
        diagnosis=body.diagnosis.strip(),
        notes=body.notes,
    )
    try:
        patient = await patient_repo.add_medical_history(patient_id, entry)
    except PatientNotFoundError:
        return _patient_not_found(request, patient_id)
    return ok(request, data=PatientResponse.from_entity(patient), message="Medical history updated")


@router.get("/{patient_id}/prescriptions", response_model=ApiResponse[list])
async def list_patient_prescriptions(
    request: Request,
    patient_id: str,
    patient_repo: PatientRepositoryDep,
    prescription_repo: PrescriptionRepositoryDep,
):
    if await patient_repo.find_by_id(patient_id) is None:
        return _patient_not_found(request, patient_id)
    prescriptions = await prescription_repo.find_by_patient_id(patient_id)
    return ok(request, data=[PrescriptionResponse.from_entity(p) for p in prescriptions])


@router.get("/{patient_id}/payments", response_model=ApiResponse[list])
async def list_patient_payments(
    request: Request,
    patient_id: str,
    patient_repo: PatientRepositoryDep,
    payment_repo: PaymentRepositoryDep,
):
    if await patient_repo.find_by_id(patient_id) is None:
        return _patient_not_found(request, patient_id)
    payments = await payment_repo.find_by_patient_id(patient_id)
    return ok(request, data=[PaymentResponse.from_entity(p) for p in payments])


def _patient_not_found(request: Request, patient_id: str):
    error = PatientNotFoundError(patient_id)
    return fail(
        request,
        error=error.error_code,
        message=error.message,
        details=error.details,
        status_code=status.HTTP_404_NOT_FOUND,
    )
