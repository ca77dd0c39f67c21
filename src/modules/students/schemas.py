"""Schemas for Students module."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import Field, field_validator

from src.modules.students.payment_status import StudentPaymentStatus
from src.modules.teachers.schemas import normalize_phone
from src.shared.schemas.base import BaseSchema


class StudentCreate(BaseSchema):
    """Schema for creating a student, optionally enrolled in groups right away."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone_number: str | None = Field(None, max_length=20)
    parent_phone_number: str | None = Field(None, max_length=20)
    branch_id: int
    payment_day_of_month: int | None = Field(None, ge=1, le=31)
    group_ids: list[int] = []

    @field_validator("phone_number", "parent_phone_number")
    @classmethod
    def check_phone(cls, v: str | None) -> str | None:
        return normalize_phone(v)


class StudentUpdate(BaseSchema):
    """
    Schema for updating a student.

    group_ids, when given, replaces the student's memberships.
    """

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    phone_number: str | None = Field(None, max_length=20)
    parent_phone_number: str | None = Field(None, max_length=20)
    payment_day_of_month: int | None = Field(None, ge=1, le=31)
    group_ids: list[int] | None = None

    @field_validator("phone_number", "parent_phone_number")
    @classmethod
    def check_phone(cls, v: str | None) -> str | None:
        return normalize_phone(v)


class StudentGroupInfo(BaseSchema):
    """Group a student is enrolled in."""

    id: int
    name: str
    price: Decimal
    teacher_name: str | None


class StudentPaymentProjection(BaseSchema):
    """Computed on read for one billing period; nothing here is stored."""

    year: int
    month: int
    has_paid_in_month: bool
    total_paid_in_month: Decimal
    expected_amount: Decimal
    remaining_amount: Decimal
    payment_status: StudentPaymentStatus
    next_due_date: date | None
    last_payment_date: datetime | None
    groups: list[StudentGroupInfo]


class StudentResponse(BaseSchema):
    """Stored student fields plus the computed payment projection."""

    id: int
    first_name: str
    last_name: str
    full_name: str
    phone_number: str | None
    parent_phone_number: str | None
    payment_day_of_month: int | None
    status: str
    branch_id: int
    branch_name: str | None
    created_at: datetime
    payment: StudentPaymentProjection


class UnpaidStudentResponse(BaseSchema):
    """One (student, group) pair with an outstanding, overdue balance."""

    student_id: int
    first_name: str
    last_name: str
    phone_number: str | None
    parent_phone_number: str | None
    remaining_amount: Decimal
    group_id: int
    group_name: str


class StudentStatisticsResponse(BaseSchema):
    """Payment status counts of a branch's students for one period."""

    branch_id: int
    year: int
    month: int
    total_students: int
    paid_students: int
    unpaid_students: int
    upcoming_students: int
    overdue_students: int
    payment_rate: float
