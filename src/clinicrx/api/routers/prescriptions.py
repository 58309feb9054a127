"""Prescription endpoints: save a drawn prescription, list, fetch and delete."""

import logging

from fastapi import APIRouter, Query, Request, status

from ...application.dto.clinic_dto import CreatePrescriptionRequest
from ...application.use_cases.create_prescription import CreatePrescriptionUseCase
from ...domain.errors import PrescriptionNotFoundError
from ..deps import CurrentUserDep, PatientRepositoryDep, PrescriberDep, PrescriptionRepositoryDep
from ..schemas.clinic import CreatePrescriptionRequest as CreatePrescriptionRequestSchema
from ..schemas.clinic import PrescriptionResponse
from ..schemas.common import ApiResponse, ErrorResponse
from ..utils.responses import ok

router = APIRouter(prefix="/prescriptions", tags=["Prescriptions"])
logger = logging.getLogger("clinicrx")


@router.post(
    "",
    response_model=ApiResponse[PrescriptionResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Save a drawn prescription",
    responses={
        400: {"model": ErrorResponse, "description": "Missing drawing or invalid fee"},
        403: {"model": ErrorResponse, "description": "Only doctors and admins may prescribe"},
        404: {"model": ErrorResponse, "description": "Patient not found"},
    },
)
async def create_prescription(
    http_request: Request,
    request: CreatePrescriptionRequestSchema,
    patient_repo: PatientRepositoryDep,
    prescription_repo: PrescriptionRepositoryDep,
    user: PrescriberDep,
):
    dto_request = CreatePrescriptionRequest(
        patient_id=request.patient_id,
        image_url=request.image_url,
        notes=request.notes,
        fee=request.fee,
        discount=request.discount,
        date=request.date,
        diagnosis=request.diagnosis,
    )
    prescription = await CreatePrescriptionUseCase(patient_repo, prescription_repo).execute(
        dto_request, doctor_id=user.user_id
    )
    return ok(
        http_request,
        data=PrescriptionResponse.from_entity(prescription),
        message="Prescription saved successfully",
    )


@router.get("", response_model=ApiResponse[list])
async def list_prescriptions(
    request: Request,
    prescription_repo: PrescriptionRepositoryDep,
    user: CurrentUserDep,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    prescriptions = await prescription_repo.find_all(limit=limit, offset=offset)
    return ok(request, data=[PrescriptionResponse.from_entity(p) for p in prescriptions])


@router.get(
    "/{prescription_id}",
    response_model=ApiResponse[PrescriptionResponse],
    responses={404: {"model": ErrorResponse, "description": "Prescription not found"}},
)
async def get_prescription(request: Request, prescription_id: str, prescription_repo: PrescriptionRepositoryDep):
    prescription = await prescription_repo.find_by_id(prescription_id)
    if prescription is None:
        raise PrescriptionNotFoundError(prescription_id)
    return ok(request, data=PrescriptionResponse.from_entity(prescription))


@router.delete(
    "/{prescription_id}",
    response_model=ApiResponse[dict],
    responses={404: {"model": ErrorResponse, "description": "Prescription not found"}},
)
async def delete_prescription(
    request: Request,
    prescription_id: str,
    prescription_repo: PrescriptionRepositoryDep,
    user: PrescriberDep,
):
    if not await prescription_repo.delete(prescription_id):
        raise PrescriptionNotFoundError(prescription_id)
    logger.info(f"Prescription {prescription_id} deleted by {user.user_id}")
    return ok(request, data={"prescription_id": prescription_id}, message="Prescription deleted")
