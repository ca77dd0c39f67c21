"""Schemas for Salaries module."""

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from src.shared.schemas.base import BaseSchema


class SalaryPaymentCreate(BaseSchema):
    """Schema for recording a salary disbursement."""

    teacher_id: int
    branch_id: int
    year: int = Field(..., ge=2000, le=2100)
    month: int = Field(..., ge=1, le=12)
    amount: Decimal = Field(..., gt=0)
    description: str | None = None


class SalaryPaymentResponse(BaseSchema):
    """Schema for salary disbursement response."""

    id: int
    teacher_id: int
    teacher_name: str | None
    year: int
    month: int
    amount: Decimal
    description: str | None
    branch_id: int
    branch_name: str | None
    created_at: datetime


class GroupSalaryInfo(BaseSchema):
    """Salary contribution of one group."""

    group_id: int
    group_name: str
    paid_students: int
    total_students: int
    group_price: Decimal
    salary_amount: Decimal


class SalaryCalculationResponse(BaseSchema):
    """Salary owed to a teacher for a period, net of disbursements."""

    teacher_id: int
    teacher_name: str
    branch_id: int
    branch_name: str | None
    year: int
    month: int
    total_salary: Decimal
    total_paid_students: int
    already_paid: Decimal
    remaining_amount: Decimal
    groups: list[GroupSalaryInfo]


class SalaryHistoryEntry(BaseSchema):
    """Calculated salary against what was actually paid for one period."""

    teacher_id: int
    teacher_name: str
    year: int
    month: int
    total_salary: Decimal
    total_paid: Decimal
    remaining_amount: Decimal
    is_fully_paid: bool
    last_payment_date: datetime | None
    payment_count: int


class RemainingSalaryResponse(BaseSchema):
    teacher_id: int
    year: int
    month: int
    remaining_amount: Decimal
