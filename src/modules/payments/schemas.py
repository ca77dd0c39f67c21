"""Pydantic schemas for Payments module."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import Field

from src.modules.payments.models import PaymentCategory, PaymentStatus
from src.shared.schemas.base import BaseSchema


class PaymentCreate(BaseSchema):
    """Schema for recording a tuition payment for one group and billing period."""

    student_id: int
    group_id: int
    branch_id: int
    amount: Decimal = Field(gt=0, description="Payment amount (must be positive)")
    description: str | None = None
    category: PaymentCategory = PaymentCategory.TUITION
    status: PaymentStatus = PaymentStatus.COMPLETED
    payment_year: int = Field(..., ge=2000, le=2100)
    payment_month: int = Field(..., ge=1, le=12)


class PaymentAmountUpdate(BaseSchema):
    """Schema for correcting the amount of a payment."""

    amount: Decimal = Field(gt=0)


class PaymentResponse(BaseSchema):
    """Schema for payment response."""

    id: int
    student_id: int | None
    student_name: str | None
    group_id: int
    group_name: str | None
    branch_id: int
    branch_name: str | None
    amount: Decimal
    description: str | None
    category: str
    status: str
    payment_year: int
    payment_month: int
    due_date: date | None
    created_at: datetime


class PaymentFilters(BaseSchema):
    """Filters for listing payments of a branch. The period applies when both year and month are set."""

    branch_id: int
    category: PaymentCategory | None = None
    year: int | None = Field(None, ge=2000, le=2100)
    month: int | None = Field(None, ge=1, le=12)
