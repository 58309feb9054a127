"""Header/footer template endpoints.

Reads are open to every authenticated user; changes need a doctor or admin.
"""

import logging
from enum import Enum

from fastapi import APIRouter, File, Request, UploadFile

from ...application.services.template_service import FOOTER, HEADER
from ...core.config import get_settings
from ..deps import TemplateEditorDep, TemplateServiceDep
from ..schemas.common import ApiResponse, ErrorResponse
from ..schemas.template import (
    FooterSchema,
    HeaderSchema,
    LogoReferenceRequest,
    UpdateFooterRequest,
    UpdateHeaderRequest,
)
from ..utils.responses import ok

router = APIRouter(prefix="/templates", tags=["Templates"])
logger = logging.getLogger("clinicrx")


class TemplateKind(str, Enum):
    HEADER = HEADER
    FOOTER = FOOTER


def _schema_for(overlay, kind: TemplateKind):
    if kind == TemplateKind.HEADER:
        return HeaderSchema.from_overlay(overlay)
    return FooterSchema.from_overlay(overlay)


@router.get("/header", response_model=ApiResponse[HeaderSchema])
async def get_header(request: Request, templates: TemplateServiceDep):
    return ok(request, data=HeaderSchema.from_overlay(templates.get_header()))


@router.put(
    "/header",
    response_model=ApiResponse[HeaderSchema],
    responses={400: {"model": ErrorResponse, "description": "Invalid alignment or font size"}},
)
async def update_header(
    request: Request,
    body: UpdateHeaderRequest,
    templates: TemplateServiceDep,
    user: TemplateEditorDep,
):
    header = templates.update_header(**body.model_dump(exclude_none=True))
    logger.info(f"Header template updated by {user.user_id}")
    return ok(request, data=HeaderSchema.from_overlay(header), message="Header saved")


@router.get("/footer", response_model=ApiResponse[FooterSchema])
async def get_footer(request: Request, templates: TemplateServiceDep):
    return ok(request, data=FooterSchema.from_overlay(templates.get_footer()))


@router.put(
    "/footer",
    response_model=ApiResponse[FooterSchema],
    responses={400: {"model": ErrorResponse, "description": "Invalid alignment or font size"}},
)
async def update_footer(
    request: Request,
    body: UpdateFooterRequest,
    templates: TemplateServiceDep,
    user: TemplateEditorDep,
):
    footer = templates.update_footer(**body.model_dump(exclude_none=True))
    logger.info(f"Footer template updated by {user.user_id}")
    return ok(request, data=FooterSchema.from_overlay(footer), message="Footer saved")


@router.post("/{kind}/toggle-bold", response_model=ApiResponse[dict])
async def toggle_bold(request: Request, kind: TemplateKind, templates: TemplateServiceDep, user: TemplateEditorDep):
    overlay = templates.toggle_bold(kind.value)
    return ok(request, data=_schema_for(overlay, kind).model_dump())


@router.post("/{kind}/toggle-italic", response_model=ApiResponse[dict])
async def toggle_italic(request: Request, kind: TemplateKind, templates: TemplateServiceDep, user: TemplateEditorDep):
    overlay = templates.toggle_italic(kind.value)
    return ok(request, data=_schema_for(overlay, kind).model_dump())


@router.post(
    "/header/logo",
    response_model=ApiResponse[HeaderSchema],
    responses={422: {"model": ErrorResponse, "description": "Logo too large or unsupported type"}},
)
async def upload_logo(
    request: Request,
    templates: TemplateServiceDep,
    user: TemplateEditorDep,
    file: UploadFile = File(..., description="JPEG, PNG or SVG logo, at most 2MB"),
):
    """Upload a header logo. It is stored inline and replaces any previous logo."""
    # one byte past the limit is enough to reject an oversized file
    limit = get_settings().upload.logo_max_bytes
    content = await file.read(limit + 1)
    header = templates.upload_logo(content, file.content_type)
    logger.info(f"Header logo uploaded by {user.user_id} ({file.filename})")
    return ok(request, data=HeaderSchema.from_overlay(header), message="Logo uploaded")


@router.put("/header/logo", response_model=ApiResponse[HeaderSchema])
async def set_logo_reference(
    request: Request,
    body: LogoReferenceRequest,
    templates: TemplateServiceDep,
    user: TemplateEditorDep,
):
    """Point the header at a logo that is already hosted elsewhere."""
    header = templates.set_logo_reference(body.logo)
    return ok(request, data=HeaderSchema.from_overlay(header), message="Logo updated")


@router.delete("/header/logo", response_model=ApiResponse[HeaderSchema])
async def clear_logo(request: Request, templates: TemplateServiceDep, user: TemplateEditorDep):
    header = templates.clear_logo()
    return ok(request, data=HeaderSchema.from_overlay(header), message="Logo removed")
