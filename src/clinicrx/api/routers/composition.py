"""Composed outputs of a saved prescription: preview, PNG, PDF and print page.

Each output is built from the header/footer templates as they are at request
time. PNG and PDF responses carry the composition generation so a client
that fired several requests for the same prescription can drop the stale ones.
"""

import logging
from typing import Tuple

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, Response

from ...domain.entities.patient import Patient
from ...domain.entities.prescription import Prescription
from ...domain.errors import PatientNotFoundError, PrescriptionNotFoundError
from ...rendering.models import PatientInfo
from ..deps import ComposerDep, PatientRepositoryDep, PrescriptionRepositoryDep, TemplateServiceDep
from ..schemas.common import ApiResponse, ErrorResponse
from ..utils.responses import ok

router = APIRouter(prefix="/prescriptions", tags=["Composition"])
logger = logging.getLogger("clinicrx")

ERRORS = {
    404: {"model": ErrorResponse, "description": "Prescription or patient not found"},
    502: {"model": ErrorResponse, "description": "Prescription image could not be loaded"},
}


async def _load(
    prescription_id: str,
    prescription_repo: PrescriptionRepositoryDep,
    patient_repo: PatientRepositoryDep,
) -> Tuple[Prescription, Patient]:
    prescription = await prescription_repo.find_by_id(prescription_id)
    if prescription is None:
        raise PrescriptionNotFoundError(prescription_id)
    patient = await patient_repo.find_by_id(prescription.patient_id)
    if patient is None:
        raise PatientNotFoundError(prescription.patient_id)
    return prescription, patient


def _composition_headers(composer, prescription_id: str, generation: int, filename: str) -> dict:
    return {
        "Content-Disposition": f'attachment; filename="{filename}"',
        "X-Composition-Generation": str(generation),
        "X-Composition-Current": str(composer.generations.is_current(prescription_id, generation)).lower(),
    }


@router.get("/{prescription_id}/preview", response_model=ApiResponse[dict], responses=ERRORS)
async def preview(
    request: Request,
    prescription_id: str,
    prescription_repo: PrescriptionRepositoryDep,
    templates: TemplateServiceDep,
    composer: ComposerDep,
):
    """Styles and lines for drawing the header and footer around the live image."""
    prescription = await prescription_repo.find_by_id(prescription_id)
    if prescription is None:
        raise PrescriptionNotFoundError(prescription_id)
    layout = composer.render_preview(templates.get_header(), templates.get_footer(), has_image=True)
    data = layout.to_dict()
    data["image_url"] = prescription.image_url
    return ok(request, data=data)


@router.get(
    "/{prescription_id}/image",
    responses={200: {"content": {"image/png": {}}}, **ERRORS},
)
async def flattened_image(
    prescription_id: str,
    prescription_repo: PrescriptionRepositoryDep,
    patient_repo: PatientRepositoryDep,
    templates: TemplateServiceDep,
    composer: ComposerDep,
):
    """Single PNG: header, prescription image, footer."""
    prescription, patient = await _load(prescription_id, prescription_repo, patient_repo)
    result = await composer.compose_flattened_image(
        prescription, templates.get_header(), templates.get_footer(), mr_number=str(patient.mr_number)
    )
    logger.info(f"Composed {result.width}x{result.height} image for prescription {prescription_id}")
    return Response(
        content=result.png,
        media_type="image/png",
        headers=_composition_headers(composer, prescription_id, result.generation, result.filename),
    )


@router.get(
    "/{prescription_id}/document",
    responses={200: {"content": {"application/pdf": {}}}, **ERRORS},
)
async def document(
    prescription_id: str,
    prescription_repo: PrescriptionRepositoryDep,
    patient_repo: PatientRepositoryDep,
    templates: TemplateServiceDep,
    composer: ComposerDep,
):
    """Paginated A4 PDF named prescription-<MR>-<M-D-YYYY>.pdf."""
    prescription, patient = await _load(prescription_id, prescription_repo, patient_repo)
    result = await composer.compose_document(
        prescription, PatientInfo.from_patient(patient), templates.get_header(), templates.get_footer()
    )
    logger.info(f"Composed {result.page_count}-page document for prescription {prescription_id}")
    headers = _composition_headers(composer, prescription_id, result.generation, result.filename)
    headers["X-Page-Count"] = str(result.page_count)
    return Response(content=result.pdf, media_type="application/pdf", headers=headers)


@router.get("/{prescription_id}/print", response_class=HTMLResponse, responses=ERRORS)
async def print_page(
    prescription_id: str,
    prescription_repo: PrescriptionRepositoryDep,
    patient_repo: PatientRepositoryDep,
    templates: TemplateServiceDep,
    composer: ComposerDep,
):
    """Self-contained page that opens the print dialog once loaded."""
    prescription, patient = await _load(prescription_id, prescription_repo, patient_repo)
    html = composer.render_print_document(
        prescription, PatientInfo.from_patient(patient), templates.get_header(), templates.get_footer()
    )
    return HTMLResponse(content=html)
