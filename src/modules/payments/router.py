"""API endpoints for Payments module."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.access import BranchAccess
from src.core.database.session import get_db
from src.modules.payments.models import PaymentCategory
from src.modules.payments.schemas import (
    PaymentAmountUpdate,
    PaymentCreate,
    PaymentFilters,
    PaymentResponse,
)
from src.modules.payments.service import PaymentService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/payments", tags=["Payments"])


def _responses(payments) -> list[PaymentResponse]:
    return [PaymentResponse.model_validate(p) for p in payments]


@router.post(
    "",
    response_model=ApiResponse[PaymentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_payment(
    data: PaymentCreate,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Record a tuition payment."""
    access.check(data.branch_id)
    service = PaymentService(db)
    payment = await service.create_payment(data)
    return ApiResponse(
        data=PaymentResponse.model_validate(payment),
        message="Payment created successfully",
    )


@router.get(
    "",
    response_model=ApiResponse[list[PaymentResponse]],
)
async def list_payments(
    access: BranchAccess,
    branch_id: int = Query(...),
    category: PaymentCategory | None = Query(None),
    year: int | None = Query(None, ge=2000, le=2100),
    month: int | None = Query(None, ge=1, le=12),
    db: AsyncSession = Depends(get_db),
):
    """List payments of a branch, optionally by category and billing period."""
    access.check(branch_id)
    filters = PaymentFilters(branch_id=branch_id, category=category, year=year, month=month)
    payments = await PaymentService(db).list_payments(filters)
    return ApiResponse(data=_responses(payments))


@router.get(
    "/date-range",
    response_model=ApiResponse[list[PaymentResponse]],
)
async def list_payments_by_date_range(
    access: BranchAccess,
    branch_id: int = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Payments recorded in a date range (inclusive)."""
    access.check(branch_id)
    payments = await PaymentService(db).list_payments_by_date_range(
        branch_id, start_date, end_date
    )
    return ApiResponse(data=_responses(payments))


@router.get(
    "/search",
    response_model=ApiResponse[list[PaymentResponse]],
)
async def search_payments(
    access: BranchAccess,
    branch_id: int = Query(...),
    student_name: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    """Search payments by student name."""
    access.check(branch_id)
    payments = await PaymentService(db).search_payments(branch_id, student_name)
    return ApiResponse(data=_responses(payments))


@router.get(
    "/recent",
    response_model=ApiResponse[list[PaymentResponse]],
)
async def list_recent_payments(
    access: BranchAccess,
    branch_id: int = Query(...),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Most recently recorded payments of a branch."""
    access.check(branch_id)
    payments = await PaymentService(db).list_recent_payments(branch_id, limit)
    return ApiResponse(data=_responses(payments))


@router.get(
    "/{payment_id}",
    response_model=ApiResponse[PaymentResponse],
)
async def get_payment(
    payment_id: int,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Get payment by ID."""
    payment = await PaymentService(db).get_payment_by_id(payment_id)
    access.check(payment.branch_id)
    return ApiResponse(data=PaymentResponse.model_validate(payment))


@router.patch(
    "/{payment_id}/amount",
    response_model=ApiResponse[PaymentResponse],
)
async def update_payment_amount(
    payment_id: int,
    data: PaymentAmountUpdate,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Correct the amount of a payment."""
    service = PaymentService(db)
    payment = await service.get_payment_by_id(payment_id)
    access.check(payment.branch_id)
    payment = await service.update_payment_amount(payment_id, data.amount)
    return ApiResponse(
        data=PaymentResponse.model_validate(payment),
        message="Payment updated successfully",
    )


@router.delete(
    "/{payment_id}",
    response_model=ApiResponse[None],
)
async def delete_payment(
    payment_id: int,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Delete a payment."""
    service = PaymentService(db)
    payment = await service.get_payment_by_id(payment_id)
    access.check(payment.branch_id)
    await service.delete_payment(payment_id)
    return ApiResponse(data=None, message="Payment deleted successfully")
