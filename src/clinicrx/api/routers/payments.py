"""Payment endpoints."""

from fastapi import APIRouter, Request, status

from ...application.dto.clinic_dto import AddPaymentRequest
from ...application.use_cases.add_payment import AddPaymentUseCase
from ..deps import CurrentUserDep, PaymentRepositoryDep, PrescriptionRepositoryDep
from ..schemas.clinic import AddPaymentRequest as AddPaymentRequestSchema
from ..schemas.clinic import PaymentResponse
from ..schemas.common import ApiResponse, ErrorResponse
from ..utils.responses import ok

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post(
    "",
    response_model=ApiResponse[PaymentResponse],
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse, "description": "Prescription not found"}},
)
async def add_payment(
    http_request: Request,
    request: AddPaymentRequestSchema,
    prescription_repo: PrescriptionRepositoryDep,
    payment_repo: PaymentRepositoryDep,
    user: CurrentUserDep,
):
    """Record a payment; the prescription is marked paid."""
    payment = await AddPaymentUseCase(prescription_repo, payment_repo).execute(
        AddPaymentRequest(
            prescription_id=request.prescription_id,
            amount=request.amount,
            method=request.method,
            discount=request.discount,
            notes=request.notes,
        ),
        user_id=user.user_id,
    )
    return ok(http_request, data=PaymentResponse.from_entity(payment), message="Payment recorded")
